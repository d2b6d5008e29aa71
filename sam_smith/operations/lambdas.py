"""
Lambda function operations: add, update, delete and list.
"""

import logging
from collections import namedtuple
from typing import Iterable, List, Optional

from .. import resources
from ..config import ARCHITECTURES
from ..document import Node
from ..errors import ConflictError, ResourceNotFoundError
from ..project import SamProject, check_name
from ..template import Template

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60

LambdaInfo = namedtuple("LambdaInfo", ["resource", "folder", "timeout", "env_vars", "layers", "policies"])


def detect_architecture(template: Template, default: str) -> str:
    """Architecture already used by the project's functions, else default."""
    for function in template.functions():
        for item in template.list_items(function, "Architectures"):
            if item in ARCHITECTURES:
                return item
    return default


def function_snippet(function_name: str, handler: str, entry_point: str, timeout: int,
                     runtime: str, architecture: str) -> str:
    """Function resource plus its LogGroup."""
    function = resources.LAMBDA_FUNCTION.format(
        function_name=function_name,
        handler=handler,
        entry_point=entry_point,
        timeout=timeout,
        runtime=runtime,
        architecture=architecture,
    )
    log_group = resources.LAMBDA_LOG_GROUP.format(function_name=function_name)
    return function + log_group


def environment_snippet(env_vars: Iterable[str]) -> str:
    variables = "\n".join(resources.ENVIRONMENT_VARIABLE.format(name=name) for name in env_vars)
    return resources.ENVIRONMENT_BLOCK.format(variables=variables)


def set_environment(template: Template, function: Node, env_vars: List[str]):
    """Replace a function's Environment block; an empty list removes it."""
    missing = [name for name in env_vars if name not in template.env_parameters()]
    if missing:
        raise ResourceNotFoundError(f"No Env parameter for: {', '.join(missing)}")

    existing = template.property_block(function, "Environment")
    if existing is not None:
        template.prune(existing)
    if env_vars:
        template.insert_property(function, environment_snippet(env_vars))


def environment_variables(template: Template, function: Node) -> List[str]:
    environment = template.property_block(function, "Environment")
    variables = environment.child("Variables") if environment is not None else None
    if variables is None:
        return []
    return [node.key for node in variables.entries()]


def add_lambda(project: SamProject, name: str, timeout: int = DEFAULT_TIMEOUT,
               env_vars: Optional[List[str]] = None) -> str:
    """
    Add a Lambda function, its LogGroup and its src/<name>/ handler pair.

    Args:
        project: Target project
        name: Lambda name; also the handler folder and exported function
        timeout: Function timeout in seconds
        env_vars: Env parameter names to wire into Environment.Variables

    Returns:
        The function's resource name
    """
    check_name(name, "Lambda")
    env_vars = list(env_vars or [])
    function_name = f"{name}Function"
    if project.sources.lambda_folder_taken(name):
        raise ConflictError(f"Cannot add Lambda {name}: src/{name} is already in use")

    with project.transaction() as template:
        folders = [template.handler_folder(fn) for fn in template.lambdas()]
        if name in folders or template.resource(function_name) is not None:
            raise ConflictError(f"Lambda {name} already exists")

        architecture = detect_architecture(template, project.settings.architecture)
        function = template.add_resource(function_snippet(
            function_name,
            handler=f"{name}/handler.{name}",
            entry_point=f"{name}/handler.ts",
            timeout=timeout,
            runtime=project.settings.runtime,
            architecture=architecture,
        ))[0]
        if env_vars:
            set_environment(template, function, env_vars)

    project.sources.write_lambda(name)
    logger.info("Added Lambda %s", function_name)
    return function_name


def update_lambda(project: SamProject, name: str, timeout: Optional[int] = None,
                  env_vars: Optional[List[str]] = None):
    """Change a Lambda's timeout and/or replace its environment variables."""
    with project.transaction() as template:
        function = project.function_resource(template, name)
        if timeout is not None:
            template.set_property(function, "Timeout", str(timeout))
        if env_vars is not None:
            set_environment(template, function, list(env_vars))
    logger.info("Updated Lambda %s", function.key)


def delete_lambda(project: SamProject, name: str):
    """Remove a Lambda, its LogGroup and its source folder."""
    with project.transaction() as template:
        function = project.function_resource(template, name)
        if len(template.lambdas()) <= 1:
            raise ConflictError(f"Cannot delete {function.key}: a project needs at least one Lambda")
        folder = template.handler_folder(function)
        template.remove_resource(function.key)
        template.remove_resource(f"{function.key}LogGroup")
        template.remove_outputs_referencing(function.key)

    if folder:
        project.sources.remove_lambda(folder)
    logger.info("Deleted Lambda %s", function.key)


def list_lambdas(project: SamProject) -> List[LambdaInfo]:
    template = project.load_template()
    rows = []
    for function in template.lambdas():
        rows.append(LambdaInfo(
            resource=function.key,
            folder=template.handler_folder(function),
            timeout=template.property_value(function, "Timeout"),
            env_vars=environment_variables(template, function),
            layers=[item.replace("!Ref ", "") for item in template.list_items(function, "Layers")],
            policies=[item.replace("!Ref ", "") for item in template.list_items(function, "Policies")],
        ))
    return rows
