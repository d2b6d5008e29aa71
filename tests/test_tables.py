"""
Tests for DynamoDB table operations.
"""

import os

import pytest

from sam_smith.errors import ConflictError, ResourceNotFoundError, SamSmithError
from sam_smith.operations.tables import (
    attach_tables,
    create_table,
    delete_table,
    detach_tables,
    list_tables,
    table_snippet,
)
from sam_smith.template import Template


def handler_source(project):
    with open(project.sources.handler_path("myapp")) as f:
        return f.read()


class TestTableSnippet:
    """Tests for the generated table resources."""

    def test_composite_key(self):
        text = table_snippet("orders", "user#tenant", "date")
        assert "        - AttributeName: user#tenant\n          KeyType: 'HASH'" in text
        assert "        - AttributeName: date\n          KeyType: 'RANGE'" in text
        assert "  ordersPolicy:\n" in text

    def test_simple_key_has_no_range(self):
        assert "RANGE" not in table_snippet("orders", "pk")


class TestTables:
    """Tests for table lifecycle, attachment and the delete guard."""

    def test_create_writes_helper(self, project, template_text):
        create_table(project, "orders", "pk", "sk")
        template = Template(template_text())
        assert template.resource("orders") is not None
        assert template.resource("ordersPolicy") is not None

        helper = project.sources.path("utils", "ordersHandler.ts")
        with open(helper) as f:
            source = f.read()
        assert 'const tableName = "sam-smith-myapp-dev-orders";' in source
        assert "Table<pk, sk, data>" in source
        assert os.path.isfile(project.sources.path("utils", "ordersHandler.spec.ts"))

    def test_simple_key_helper(self, project):
        create_table(project, "orders", "pk")
        with open(project.sources.path("utils", "ordersHandler.ts")) as f:
            assert "Table<pk, never, data>" in f.read()

    def test_partition_key_required(self, project):
        with pytest.raises(SamSmithError):
            create_table(project, "orders", "")

    def test_duplicate(self, project):
        create_table(project, "orders", "pk")
        with pytest.raises(ConflictError):
            create_table(project, "orders", "pk")

    def test_attach_adds_policy_and_import(self, project, template_text):
        create_table(project, "orders", "pk")
        create_table(project, "users", "id")
        attach_tables(project, "myapp", ["orders", "users", "orders"])

        template = Template(template_text())
        function = template.resource("myappFunction")
        assert template.list_items(function, "Policies") == ["!Ref ordersPolicy", "!Ref usersPolicy"]
        assert list_tables(project) == {"orders": ["myappFunction"], "users": ["myappFunction"]}

        lines = handler_source(project).split("\n")
        assert lines[2] == "import { tryOrdersQuery } from '../utils/ordersHandler';"
        assert lines[3] == "import { tryUsersQuery } from '../utils/usersHandler';"

    def test_attach_twice(self, project):
        create_table(project, "orders", "pk")
        attach_tables(project, "myapp", ["orders"])
        with pytest.raises(ConflictError):
            attach_tables(project, "myapp", ["orders"])

    def test_delete_refused_while_attached(self, project):
        create_table(project, "orders", "pk")
        attach_tables(project, "myapp", ["orders"])
        with pytest.raises(ConflictError) as excinfo:
            delete_table(project, "orders")
        assert excinfo.value.referrers == ["myappFunction"]

    def test_detach_then_delete_restores_project(self, project, template_text):
        template_before = template_text()
        handler_before = handler_source(project)

        create_table(project, "orders", "pk", "sk")
        attach_tables(project, "myapp", ["orders"])
        detach_tables(project, "myapp", ["orders"])
        delete_table(project, "orders")

        assert template_text() == template_before
        assert handler_source(project) == handler_before
        assert not os.path.exists(project.sources.path("utils", "ordersHandler.ts"))

    def test_detach_not_attached(self, project):
        create_table(project, "orders", "pk")
        with pytest.raises(ResourceNotFoundError):
            detach_tables(project, "myapp", ["orders"])
