"""
Tests for project generation.
"""

import json
import os

import pytest

from sam_smith.errors import ConflictError, ResourceNotFoundError, SamSmithError
from sam_smith.generator import ProjectGenerator
from sam_smith.template import Template


class TestGenerate:
    """Tests for the generated project layout and template."""

    def test_files(self, project):
        for name in ("template.yaml", "samconfig.toml", "package.json", "tsconfig.json", "jest.config.js", ".env"):
            assert os.path.isfile(os.path.join(project.path, name)), name
        for name in ("myapp/handler.ts", "myapp/handler.test.ts", "utils/greet.ts", "utils/greet.test.ts"):
            assert os.path.isfile(project.sources.path(name)), name

    def test_template_layout(self, project, template_text):
        text = template_text()
        assert text.startswith("AWSTemplateFormatVersion: '2010-09-09'\nTransform: AWS::Serverless-2016-10-31\n")
        positions = [text.index(marker) for marker in (
            "\nParameters:\n", "\nResources:\n", "  ParamA1:", "  ParamA3:",
            "  myappFunction:", "  myappFunctionLogGroup:", "  myappApi:", "\nOutputs:\n", "  myappApiUrl:",
        )]
        assert positions == sorted(positions)
        assert "\n\n\n" not in text
        assert text.endswith("\n") and not text.endswith("\n\n")

    def test_function(self, project, template_text):
        template = Template(template_text())
        function = template.resource("myappFunction")
        assert template.property_value(function, "Handler") == "myapp/handler.myapp"
        assert template.list_items(function, "Architectures") == ["arm64"]
        keys = [n.key for n in template.properties(function).entries()]
        assert keys[-2:] == ["Environment", "Events"]
        assert template.env_parameters() == {"A1": "1", "A2": "2", "A3": "3"}
        assert "            RestApiId: !Ref myappApi\n            Path: /hello\n            Method: get\n" in template_text()

    def test_samconfig_and_package(self, project):
        with open(os.path.join(project.path, "samconfig.toml")) as f:
            samconfig = f.read()
        assert 'stack_name = "sam-smith-myapp-dev"' in samconfig
        assert 'region = "us-east-1"' in samconfig
        with open(os.path.join(project.path, "package.json")) as f:
            package = json.load(f)
        assert package["name"] == "myapp"
        assert package["scripts"]["test"] == "jest"

    def test_existing_project(self, project, generator, tmp_path):
        with pytest.raises(ConflictError):
            generator.generate(str(tmp_path))

    def test_unknown_env_var(self, generator, tmp_path):
        generator.set_function("myapp", env_vars=["NOPE"])
        with pytest.raises(ResourceNotFoundError):
            generator.generate(str(tmp_path))
        assert not os.path.exists(tmp_path / "myapp")

    def test_shared_folder_name_is_refused(self, generator, tmp_path):
        generator.set_function("utils")
        with pytest.raises(ConflictError):
            generator.generate(str(tmp_path))
        assert not os.path.exists(tmp_path / "myapp")

    def test_env_key_with_underscore_is_refused(self, generator, tmp_path):
        source = tmp_path / "source.env"
        source.write_text("A1=1\nA3=3\nTABLE_PREFIX=x\n")
        with pytest.raises(SamSmithError, match="TABLE_PREFIX"):
            generator.generate(str(tmp_path))
        assert not os.path.exists(tmp_path / "myapp")

    def test_names_are_made_safe(self, settings, tmp_path):
        gen = ProjectGenerator("my-app", settings)
        gen.set_function("get-user")
        gen.set_api("users-api")
        project = gen.generate(str(tmp_path))

        template = project.load_template()
        function = template.resource("getuserFunction")
        assert template.property_value(function, "Handler") == "get-user/handler.getUser"
        assert template.resource("usersapi") is not None
        assert os.path.isfile(project.sources.path("get-user", "handler.ts"))
        assert template.parameters() == []

    def test_basic_auth_template(self, generator, tmp_path):
        generator.set_template("basic-auth")
        project = generator.generate(str(tmp_path))
        template = project.load_template()
        assert template.resource("BasicAuthorizerFunction") is not None
        assert os.path.isfile(project.sources.path("authorizer", "authorizer.ts"))

    def test_cognito_template(self, generator, tmp_path):
        generator.set_template("cognito-auth", pool_name="staff")
        project = generator.generate(str(tmp_path))
        template = project.load_template()
        assert template.resource("staffUserPool") is not None
        assert template.referrers("staffUserPool", kind="auth") == ["myappApi"]

    def test_unknown_template(self, generator):
        with pytest.raises(SamSmithError):
            generator.set_template("premium")


class TestConfig:
    """Tests for config-file mode."""

    def test_dict_round_trip(self, generator, settings):
        generator.set_template("cognito-auth", pool_name="staff")
        copy = ProjectGenerator.from_dict(generator.to_dict(), settings)
        assert copy.to_dict() == generator.to_dict()

    def test_from_json(self, tmp_path, env_file, settings):
        config = tmp_path / "app.json"
        config.write_text(json.dumps({
            "project_name": "orders",
            "function_name": "listOrders",
            "timeout": 15,
            "env_vars": ["A2"],
            "architecture": "x86_64",
            "env_file": str(env_file),
        }))
        gen = ProjectGenerator.from_json(str(config), settings)
        project = gen.generate(str(tmp_path))

        template = project.load_template()
        function = template.resource("listOrdersFunction")
        assert template.property_value(function, "Timeout") == "15"
        assert template.list_items(function, "Architectures") == ["x86_64"]
        assert template.resource("ordersApi") is not None
