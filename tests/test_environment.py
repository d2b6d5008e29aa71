"""
Tests for .env handling and environment reconciliation.
"""

import pytest

from sam_smith.envfile import compute_env_changes, read_env_file
from sam_smith.errors import SamSmithError, TemplateIOError
from sam_smith.operations.environment import reconcile_environment
from sam_smith.template import Template


def write_env(project, text):
    with open(project.env_path, "w") as f:
        f.write(text)


class TestEnvFile:
    """Tests for reading .env files."""

    def test_read_skips_reserved_and_comments(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("# comment\nENVIRONMENT=prod\nA1=one\n\nA2='two words'\n")
        assert read_env_file(str(path)) == {"A1": "one", "A2": "two words"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(TemplateIOError):
            read_env_file(str(tmp_path / ".env"))
        assert read_env_file(str(tmp_path / ".env"), required=False) == {}

    def test_keys_must_be_alphanumeric(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("ENVIRONMENT=prod\nDB_HOST=h\n")
        with pytest.raises(SamSmithError, match="DB_HOST"):
            read_env_file(str(path))

    def test_compute_changes(self):
        changes = compute_env_changes({"A1": "10", "A2": "2", "A4": "4"}, {"A1": "1", "A2": "2", "A3": "3"})
        assert changes.new == ["A4"]
        assert changes.removed == ["A3"]
        assert changes.changed == ["A1"]


class TestReconcile:
    """Tests for syncing Env parameters with .env."""

    def test_generated_project_is_in_sync(self, project, template_text):
        before = template_text()
        result = reconcile_environment(project)
        assert (result.added, result.removed, result.changed) == ([], [], [])
        assert template_text() == before

    def test_add_remove_and_change(self, project, template_text):
        write_env(project, "A1=10\nA2=2\nA4=4\n")
        result = reconcile_environment(project)
        assert result.added == ["A4"]
        assert result.removed == ["A3"]
        assert result.changed == ["A1"]

        template = Template(template_text())
        assert template.env_parameters() == {"A1": "10", "A2": "2", "A4": "4"}
        assert template.resource("ParamA4") is not None
        assert template.resource("ParamA3") is None
        assert "EnvA3" not in template_text()
        assert "          A1: !Ref EnvA1\n" in template_text()
        assert "/sam-smith/dev/myapp/A4" in template_text()

    def test_second_run_is_a_no_op(self, project, template_text):
        write_env(project, "A1=10\nA4=4\n")
        reconcile_environment(project)
        after_first = template_text()

        result = reconcile_environment(project)
        assert (result.added, result.removed, result.changed) == ([], [], [])
        assert template_text() == after_first

    def test_removing_last_variable_prunes_environment(self, project, template_text):
        write_env(project, "A2=2\n")
        reconcile_environment(project)
        template = Template(template_text())
        assert template.property_block(template.resource("myappFunction"), "Environment") is None
        assert template.env_parameters() == {"A2": "2"}

    def test_confirm_can_keep_variables(self, project, template_text, mocker):
        write_env(project, "A1=1\n")
        confirm = mocker.Mock(side_effect=lambda name: name == "A2")
        result = reconcile_environment(project, confirm=confirm)

        assert confirm.call_count == 2
        assert result.removed == ["A2"]
        assert result.kept == ["A3"]
        assert "EnvA3" in template_text()
        assert "EnvA2" not in template_text()

    def test_passes_can_be_disabled(self, project, template_text):
        before = template_text()
        result = reconcile_environment(project, env={"A1": "9", "A5": "5"},
                                       add_new=False, remove_old=False, update_changed=False)
        assert (result.added, result.removed, result.changed) == ([], [], [])
        assert template_text() == before

    def test_values_with_quotes(self, project, template_text):
        write_env(project, "A1=it's\nA2=2\nA3=3\n")
        reconcile_environment(project)
        assert "    Default: 'it''s'\n" in template_text()
        assert reconcile_environment(project).changed == []

    def test_invalid_key_leaves_template_untouched(self, project, template_text):
        before = template_text()
        write_env(project, "A1=1\nA2=2\nA3=3\nDB_HOST=h\n")
        with pytest.raises(SamSmithError, match="DB_HOST"):
            reconcile_environment(project)
        with pytest.raises(SamSmithError):
            reconcile_environment(project, env={"A1": "1", "A2": "2", "A3": "3", "DB_HOST": "h"})
        assert template_text() == before
