"""
DynamoDB table operations.

A table is a Table resource plus a <Table>Policy managed policy. Functions
get access by listing the policy under Policies, and their handler imports
the table's query helper from src/utils.
"""

import logging
from typing import Dict, List

from .. import resources
from ..errors import ConflictError, ResourceNotFoundError, SamSmithError
from ..project import SamProject, check_name
from ..template import MANAGED_POLICY, TABLE

logger = logging.getLogger(__name__)


def _policy(table: str) -> str:
    return f"{table}Policy"


def _ref(name: str) -> str:
    return f"!Ref {name}"


def table_snippet(name: str, partition_key: str, sort_key: str = "") -> str:
    """
    Table resource and its CRUD policy.

    Key paths are '#'-separated attribute parts; the whole path is the
    attribute name, e.g. "user#tenant".
    """
    attributes = [resources.DYNAMODB_ATTRIBUTE.format(attribute=partition_key)]
    keys = [resources.DYNAMODB_KEY.format(attribute=partition_key, key_type="HASH")]
    if sort_key:
        attributes.append(resources.DYNAMODB_ATTRIBUTE.format(attribute=sort_key))
        keys.append(resources.DYNAMODB_KEY.format(attribute=sort_key, key_type="RANGE"))

    table = resources.DYNAMODB_TABLE.format(
        table_name=name,
        attribute_definitions="\n".join(attributes),
        key_schema="\n".join(keys),
    )
    return table + resources.TABLE_POLICY.format(table_name=name)


def create_table(project: SamProject, name: str, partition_key: str, sort_key: str = ""):
    """Add a table, its policy and the src/utils/<name>Handler.ts helper pair."""
    check_name(name, "table")
    if not partition_key:
        raise SamSmithError(f"Table {name} needs a partition key")
    with project.transaction() as template:
        for resource_name in (name, _policy(name)):
            if template.resource(resource_name) is not None:
                raise ConflictError(f"Resource {resource_name} already exists")
        template.add_resource(table_snippet(name, partition_key, sort_key))

    full_name = f"{project.settings.stack_name(project.name)}-{name}"
    project.sources.write_table(name, full_name, partition_key, sort_key)
    logger.info("Created table %s", name)


def delete_table(project: SamProject, name: str):
    """
    Delete a table and its policy.

    Raises:
        ConflictError: listing functions whose Policies still reference it
    """
    with project.transaction() as template:
        template.require(name, TABLE, "Table")
        attached = template.referrers(_policy(name), kind="policy")
        if attached:
            raise ConflictError(f"Table {name} is attached to: {', '.join(attached)}", referrers=attached)
        template.remove_resource(name)
        template.remove_resource(_policy(name))

    project.sources.remove_table(name)
    logger.info("Deleted table %s", name)


def attach_tables(project: SamProject, lambda_name: str, tables: List[str]):
    """Grant a Lambda access to tables and import their helpers in its handler."""
    tables = list(dict.fromkeys(tables))
    with project.transaction() as template:
        function = project.function_resource(template, lambda_name)
        current = template.list_items(function, "Policies")
        for table in tables:
            template.require(table, TABLE, "Table")
            template.require(_policy(table), MANAGED_POLICY, "Table policy")
            if _ref(_policy(table)) in current:
                raise ConflictError(f"Table {table} is already attached to {function.key}")
        for table in tables:
            template.add_list_item(function, "Policies", _ref(_policy(table)))
        folder = template.handler_folder(function)

    for table in tables:
        project.sources.add_table_import(folder, table)
    logger.info("Attached %s to %s", ", ".join(tables), function.key)


def detach_tables(project: SamProject, lambda_name: str, tables: List[str]):
    with project.transaction() as template:
        function = project.function_resource(template, lambda_name)
        current = template.list_items(function, "Policies")
        missing = [table for table in tables if _ref(_policy(table)) not in current]
        if missing:
            raise ResourceNotFoundError(f"Not attached to {function.key}: {', '.join(missing)}")
        for table in tables:
            template.remove_list_item(function, "Policies", _ref(_policy(table)))
        folder = template.handler_folder(function)

    for table in tables:
        project.sources.remove_table_import(folder, table)
    logger.info("Detached %s from %s", ", ".join(tables), function.key)


def list_tables(project: SamProject) -> Dict[str, List[str]]:
    """Table name -> functions with its policy."""
    template = project.load_template()
    return {node.key: template.referrers(_policy(node.key), kind="policy") for node in template.tables()}
