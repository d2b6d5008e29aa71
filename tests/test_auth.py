"""
Tests for API Gateway authentication.
"""

import os

import pytest

from sam_smith.errors import ConflictError, ResourceNotFoundError
from sam_smith.operations.api import create_api_gateway, delete_api_gateway
from sam_smith.operations.auth import add_basic_auth, add_cognito_auth, remove_auth
from sam_smith.template import Template


def authorizer_dir(project):
    return project.sources.path("authorizer")


class TestBasicAuth:
    """Tests for the shared basic authorizer."""

    def test_add_then_remove_restores_template(self, project, template_text):
        before = template_text()
        add_basic_auth(project, "myappApi")

        template = Template(template_text())
        api = template.resource("myappApi")
        assert [n.key for n in template.properties(api).entries()] == ["Name", "StageName", "Auth", "Cors"]
        assert template.resource("BasicAuthorizerFunction") is not None
        assert template.resource("BasicAuthorizerFunctionLogGroup") is not None
        assert os.path.isfile(os.path.join(authorizer_dir(project), "authorizer.ts"))

        assert remove_auth(project, "myappApi") == "BasicAuthorizer"
        assert template_text() == before
        assert not os.path.exists(authorizer_dir(project))

    def test_authorizer_is_not_a_lambda(self, project, template_text):
        add_basic_auth(project, "myappApi")
        template = Template(template_text())
        assert [fn.key for fn in template.lambdas()] == ["myappFunction"]

    def test_authorizer_shared_between_gateways(self, project, template_text):
        create_api_gateway(project, "api2")
        add_basic_auth(project, "myappApi")
        add_basic_auth(project, "api2")
        assert template_text().count("  BasicAuthorizerFunction:\n") == 1

        remove_auth(project, "myappApi")
        assert "  BasicAuthorizerFunction:\n" in template_text()
        assert os.path.isdir(authorizer_dir(project))

        remove_auth(project, "api2")
        assert "BasicAuthorizerFunction" not in template_text()
        assert not os.path.exists(authorizer_dir(project))

    def test_deleting_last_protected_gateway_releases_authorizer(self, project, template_text):
        add_basic_auth(project, "myappApi")
        delete_api_gateway(project, "myappApi")
        assert "BasicAuthorizerFunction" not in template_text()
        assert not os.path.exists(authorizer_dir(project))

    def test_auth_already_configured(self, project, template_text):
        add_basic_auth(project, "myappApi")
        before = template_text()
        with pytest.raises(ConflictError):
            add_basic_auth(project, "myappApi")
        with pytest.raises(ConflictError):
            add_cognito_auth(project, "myappApi", "main")
        assert template_text() == before

    def test_unknown_gateway(self, project):
        with pytest.raises(ResourceNotFoundError):
            add_basic_auth(project, "nope")


class TestCognitoAuth:
    """Tests for Cognito user pool authentication."""

    def test_add_creates_pool_client_and_outputs(self, project, template_text):
        add_cognito_auth(project, "myappApi", "main")
        template = Template(template_text())
        assert template.resource("mainUserPool") is not None
        assert template.resource("mainUserPoolClient") is not None
        assert [n.key for n in template.outputs()] == ["myappApiUrl", "mainUserPoolId", "mainUserPoolClientId"]
        assert template.referrers("mainUserPool", kind="auth") == ["myappApi"]

    def test_remove_keeps_pool(self, project, template_text):
        add_cognito_auth(project, "myappApi", "main")
        assert remove_auth(project, "myappApi") == "CognitoAuthorizer"
        template = Template(template_text())
        assert template.property_block(template.resource("myappApi"), "Auth") is None
        assert template.resource("mainUserPool") is not None

    def test_existing_pool_name(self, project):
        create_api_gateway(project, "api2")
        add_cognito_auth(project, "myappApi", "main")
        with pytest.raises(ConflictError):
            add_cognito_auth(project, "api2", "main")

    def test_remove_without_auth(self, project):
        with pytest.raises(ResourceNotFoundError):
            remove_auth(project, "myappApi")
