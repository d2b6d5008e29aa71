"""
Environment variable reconciliation.

A variable X lives in three places:
  - Parameters: EnvX (String, Default from .env)
  - Resources: ParamX, an SSM parameter whose Value is !Ref EnvX
  - Functions: Environment.Variables.X: !Ref EnvX

Reconciliation brings the template in line with .env in three independent
passes (new, removed, changed). A second run with the same .env is a no-op.
"""

import logging
from collections import namedtuple
from typing import Callable, Dict, Optional

from .. import resources
from ..envfile import compute_env_changes, read_env_file
from ..project import SamProject, check_name
from ..template import SSM_PARAMETER, Template, quote

logger = logging.getLogger(__name__)

ReconcileResult = namedtuple("ReconcileResult", ["added", "removed", "changed", "kept"])


def add_env_variable(template: Template, name: str, value: str, project_name: str, settings):
    """Add the EnvX parameter and the ParamX SSM resource."""
    check_name(name, "environment variable")
    template.add_parameter(resources.ENV_PARAMETER.format(name=name, value=quote(value)))

    section = template.resources_section()
    ssm = template.resources_of_type(SSM_PARAMETER)
    index = section.children.index(ssm[-1]) + 1 if ssm else 0
    template.add_resource(resources.SSM_PARAMETER.format(
        name=name,
        ssm_prefix=settings.ssm_prefix,
        environment=settings.environment,
        project_name=project_name,
    ), index=index)


def remove_env_variable(template: Template, name: str):
    """Strip EnvX, ParamX and every function's reference to EnvX."""
    parameter = f"Env{name}"
    for ref in template.references(parameter):
        if ref.kind == "environment" and ref.node.parent is not None:
            template.prune(ref.node)
    template.remove_resource(f"Param{name}")
    node = template.section("Parameters").child(parameter)
    if node is not None:
        template.prune(node)


def set_env_default(template: Template, name: str, value: str):
    template.section("Parameters").child(f"Env{name}").child("Default").set_value(quote(value))


def reconcile_environment(project: SamProject, env: Optional[Dict[str, str]] = None,
                          add_new: bool = True, remove_old: bool = True, update_changed: bool = True,
                          confirm: Optional[Callable[[str], bool]] = None) -> ReconcileResult:
    """
    Sync Env parameters with the project's .env file.

    Args:
        project: Target project
        env: Variables to sync against (defaults to reading project's .env)
        add_new: Add variables present only in .env
        remove_old: Remove variables no longer in .env
        update_changed: Rewrite defaults whose value changed
        confirm: Called once per variable to remove; False keeps it

    Returns:
        ReconcileResult with the names handled in each pass
    """
    if env is None:
        env = read_env_file(project.env_path)

    added, removed, changed, kept = [], [], [], []
    with project.transaction() as template:
        changes = compute_env_changes(env, template.env_parameters())

        if add_new:
            for name in changes.new:
                add_env_variable(template, name, env[name], project.name, project.settings)
                added.append(name)

        if remove_old:
            for name in changes.removed:
                if confirm is not None and not confirm(name):
                    kept.append(name)
                    continue
                remove_env_variable(template, name)
                removed.append(name)

        if update_changed:
            for name in changes.changed:
                set_env_default(template, name, env[name])
                changed.append(name)

    if added or removed or changed:
        logger.info("Environment reconciled: %d added, %d removed, %d changed", len(added), len(removed), len(changed))
    else:
        logger.debug("Environment already in sync")
    return ReconcileResult(added, removed, changed, kept)
