"""
Mutation operations over a SamProject.

Each operation reads template.yaml, validates, edits the tree, writes the
template back and only then touches src/.
"""

from .api import (
    add_endpoint,
    create_api_gateway,
    delete_api_gateway,
    delete_endpoint,
    list_gateway_endpoints,
    update_endpoint,
)
from .auth import add_basic_auth, add_cognito_auth, remove_auth
from .environment import reconcile_environment
from .lambdas import add_lambda, delete_lambda, list_lambdas, update_lambda
from .layers import attach_layer, create_layer, delete_layer, detach_layer, list_layers
from .tables import attach_tables, create_table, delete_table, detach_tables, list_tables

__all__ = [
    "add_endpoint",
    "add_basic_auth",
    "add_cognito_auth",
    "add_lambda",
    "attach_layer",
    "attach_tables",
    "create_api_gateway",
    "create_layer",
    "create_table",
    "delete_api_gateway",
    "delete_endpoint",
    "delete_lambda",
    "delete_layer",
    "delete_table",
    "detach_layer",
    "detach_tables",
    "list_gateway_endpoints",
    "list_lambdas",
    "list_layers",
    "list_tables",
    "reconcile_environment",
    "remove_auth",
    "update_endpoint",
    "update_lambda",
]
