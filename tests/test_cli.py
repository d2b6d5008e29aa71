"""
Tests for the command-line interface.
"""

import json
import os
import sys

import pytest

from sam_smith import cli
from sam_smith.template import Template


def run(mocker, *argv, answers=()):
    mocker.patch.object(sys, "argv", ["sam-smith", *argv])
    mocker.patch("builtins.input", side_effect=list(answers))
    cli.main()


class TestMain:
    """Tests for argument handling and exit codes."""

    def test_version(self, mocker, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run(mocker, "--version")
        assert excinfo.value.code == 0
        assert "sam-smith" in capsys.readouterr().out

    def test_missing_project_exits_with_error(self, mocker, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run(mocker, "update", str(tmp_path / "nowhere"))
        assert excinfo.value.code == 1
        assert "Template not found" in capsys.readouterr().out

    def test_keyboard_interrupt_exits_cleanly(self, mocker, project):
        mocker.patch.object(sys, "argv", ["sam-smith", "update", project.path])
        mocker.patch("builtins.input", side_effect=KeyboardInterrupt)
        with pytest.raises(SystemExit) as excinfo:
            cli.main()
        assert excinfo.value.code == 0

    def test_create_from_config(self, mocker, tmp_path, env_file, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = tmp_path / "app.json"
        config.write_text(json.dumps({"project_name": "shop", "env_file": str(env_file)}))
        run(mocker, "create", "--config", str(config), "--output", str(tmp_path))
        assert os.path.isfile(tmp_path / "shop" / "template.yaml")


class TestUpdateMenu:
    """Tests for the interactive update menu."""

    def test_exit_immediately(self, mocker, project, template_text):
        before = template_text()
        run(mocker, "update", project.path, answers=["7"])
        assert template_text() == before

    def test_list_lambdas(self, mocker, project, capsys):
        run(mocker, "update", project.path, answers=["2", "1", "7"])
        out = capsys.readouterr().out
        assert "myappFunction" in out
        assert "A1, A3" in out

    def test_add_lambda(self, mocker, project, template_text):
        # Lambdas > Add, name, timeout, env vars (none), Exit
        run(mocker, "update", project.path, answers=["2", "2", "lambda2", "30", "", "7"])
        template = Template(template_text())
        assert template.resource("lambda2Function") is not None

    def test_errors_do_not_end_the_session(self, mocker, project, capsys):
        # Lambdas > Delete the only Lambda, confirm, then Exit
        run(mocker, "update", project.path, answers=["2", "4", "1", "y", "7"])
        assert "at least one Lambda" in capsys.readouterr().out

    def test_create_layer(self, mocker, project, template_text):
        run(mocker, "update", project.path, answers=["5", "2", "shared", "7"])
        assert "  shared:\n" in template_text()
