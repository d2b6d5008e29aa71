"""
API Gateway authentication: a shared Basic (Lambda) authorizer, or one
Cognito user pool per call.
"""

import logging

from .. import resources
from ..errors import ConflictError, ResourceNotFoundError
from ..project import SamProject, check_name, safe_name
from ..template import API, Template
from .lambdas import detect_architecture, function_snippet

logger = logging.getLogger(__name__)

BASIC = "BasicAuthorizer"
COGNITO = "CognitoAuthorizer"


def _require_gateway(template: Template, gateway: str):
    return template.require(safe_name(gateway), API, "API Gateway")


def release_basic_authorizer(template: Template) -> bool:
    """
    Drop the shared authorizer function and LogGroup once no gateway uses it.

    Returns:
        True when the authorizer was removed and its sources should go too
    """
    name = resources.BASIC_AUTHORIZER_NAME
    if template.resource(name) is None or template.referrers(name, kind="auth"):
        return False
    template.remove_resource(name)
    template.remove_resource(f"{name}LogGroup")
    logger.debug("Released %s", name)
    return True


def add_basic_auth(project: SamProject, gateway: str):
    """Protect a gateway with the shared header-key authorizer."""
    with project.transaction() as template:
        api = _require_gateway(template, gateway)
        if template.property_block(api, "Auth") is not None:
            raise ConflictError(f"{api.key} already has authentication configured")

        if template.resource(resources.BASIC_AUTHORIZER_NAME) is None:
            template.add_resource(function_snippet(
                resources.BASIC_AUTHORIZER_NAME,
                handler=resources.BASIC_AUTHORIZER_HANDLER,
                entry_point=resources.BASIC_AUTHORIZER_ENTRY_POINT,
                timeout=resources.BASIC_AUTHORIZER_TIMEOUT,
                runtime=project.settings.runtime,
                architecture=detect_architecture(template, project.settings.architecture),
            ))
        template.insert_property(api, resources.BASIC_AUTH)

    project.sources.write_authorizer()
    logger.info("Added basic auth to %s", api.key)


def add_cognito_auth(project: SamProject, gateway: str, pool_name: str):
    """Protect a gateway with a new Cognito user pool and client."""
    check_name(pool_name, "user pool")
    with project.transaction() as template:
        api = _require_gateway(template, gateway)
        if template.property_block(api, "Auth") is not None:
            raise ConflictError(f"{api.key} already has authentication configured")
        if template.resource(f"{pool_name}UserPool") is not None:
            raise ConflictError(f"User pool {pool_name}UserPool already exists")

        template.insert_property(api, resources.COGNITO_AUTH.format(pool_name=pool_name))
        template.add_resource(
            resources.COGNITO_USER_POOL.format(pool_name=pool_name)
            + resources.COGNITO_USER_POOL_CLIENT.format(pool_name=pool_name)
        )
        template.add_output(resources.COGNITO_OUTPUTS.format(pool_name=pool_name))

    logger.info("Added Cognito auth to %s with pool %sUserPool", api.key, pool_name)


def remove_auth(project: SamProject, gateway: str) -> str:
    """
    Remove a gateway's Auth block.

    Basic auth also releases the shared authorizer when this was its last
    gateway. Cognito pools are kept.

    Returns:
        The removed DefaultAuthorizer name
    """
    released = False
    with project.transaction() as template:
        api = _require_gateway(template, gateway)
        auth = template.property_block(api, "Auth")
        if auth is None:
            raise ResourceNotFoundError(f"{api.key} has no authentication configured")
        default = auth.child("DefaultAuthorizer")
        kind = default.value if default is not None else ""
        template.prune(auth)
        if kind == BASIC:
            released = release_basic_authorizer(template)

    if released:
        project.sources.remove_authorizer()
    logger.info("Removed %s from %s", kind or "auth", api.key)
    return kind
