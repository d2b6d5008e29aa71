"""
SAM Project Generator

This module scaffolds a new sam-smith project: template.yaml, deploy
configuration, TypeScript tooling files and the first Lambda's sources.
The template is assembled with the same edit operations used later by
`sam-smith update`, so a fresh project is already in canonical form.
"""

import json
import logging
import os
import shutil
from typing import Dict, List, Optional

from . import resources
from .config import Settings
from .envfile import read_env_file
from .errors import ConflictError, ResourceNotFoundError, SamSmithError
from .operations.api import add_event, gateway_name
from .operations.auth import add_basic_auth, add_cognito_auth
from .operations.environment import add_env_variable
from .operations.lambdas import environment_snippet, function_snippet
from .project import ENV_FILE, TEMPLATE_FILE, SamProject, safe_name, to_camel_case
from .resources import sources as boilerplate
from .sources import SHARED_FOLDERS
from .template import Template

logger = logging.getLogger(__name__)

TEMPLATES = ("basic", "basic-auth", "cognito-auth")


class ProjectGenerator:
    """
    Main class for generating sam-smith projects.

    Usage:
        generator = ProjectGenerator("my-app")
        generator.set_function("orders", timeout=30, env_vars=["TABLEPREFIX"])
        generator.set_api("ordersApi")
        generator.generate("./projects")
    """

    def __init__(self, project_name: str, settings: Optional[Settings] = None):
        self.project_name = project_name
        self.settings = settings or Settings.from_env()
        self.function_name = project_name
        self.api_name = f"{safe_name(project_name)}Api"
        self.timeout = 60
        self.env_vars: List[str] = []
        self.template_name = "basic"
        self.architecture = self.settings.architecture
        self.env_file: Optional[str] = self.settings.env_file
        self.pool_name = "main"

    def set_function(self, name: str, timeout: int = 60, env_vars: Optional[List[str]] = None):
        """Configure the project's first Lambda."""
        self.function_name = name
        self.timeout = timeout
        self.env_vars = list(env_vars or [])

    def set_api(self, name: str):
        self.api_name = name

    def set_template(self, template_name: str, pool_name: str = "main"):
        """
        Choose the starting template.

        Args:
            template_name: basic, basic-auth or cognito-auth
            pool_name: Cognito pool prefix for cognito-auth
        """
        if template_name not in TEMPLATES:
            raise SamSmithError(f"Unknown template '{template_name}', expected one of {', '.join(TEMPLATES)}")
        self.template_name = template_name
        self.pool_name = pool_name

    def read_env(self) -> Dict[str, str]:
        if not self.env_file:
            return {}
        return read_env_file(self.env_file, required=False)

    def render_template(self, env: Dict[str, str]) -> str:
        """
        Build template.yaml text.

        Args:
            env: Variables from .env; each becomes an Env parameter and SSM resource

        Returns:
            The template text
        """
        missing = [name for name in self.env_vars if name not in env]
        if missing:
            raise ResourceNotFoundError(f"Variables not found in .env: {', '.join(missing)}")

        header = resources.TEMPLATE_HEADER.format(project_name=self.project_name)
        template = Template(header.strip("\n") + "\n\nResources:\n")

        for name, value in env.items():
            add_env_variable(template, name, value, self.project_name, self.settings)

        function_name = f"{safe_name(self.function_name)}Function"
        api = gateway_name(self.api_name)
        function = template.add_resource(function_snippet(
            function_name,
            handler=f"{self.function_name}/handler.{to_camel_case(self.function_name)}",
            entry_point=f"{self.function_name}/handler.ts",
            timeout=self.timeout,
            runtime=self.settings.runtime,
            architecture=self.architecture,
        ))[0]
        if self.env_vars:
            template.insert_property(function, environment_snippet(self.env_vars))

        template.add_resource(resources.API_GATEWAY.format(api_name=api))
        template.add_output(resources.API_URL_OUTPUT.format(api_name=api))
        add_event(template, function, api, "get", "/hello")

        template.check()
        return template.render()

    def generate(self, parent_dir: str = ".") -> SamProject:
        """
        Write the project to <parent_dir>/<project_name>.

        Returns:
            The generated SamProject
        """
        project_path = os.path.join(parent_dir, self.project_name)
        if os.path.exists(os.path.join(project_path, TEMPLATE_FILE)):
            raise ConflictError(f"A project already exists in {project_path}")
        if self.function_name in SHARED_FOLDERS:
            raise ConflictError(f"Lambda name {self.function_name} is reserved for a shared src/ folder")

        env = self.read_env()
        template_text = self.render_template(env)

        os.makedirs(project_path, exist_ok=True)
        self._write(project_path, TEMPLATE_FILE, template_text)

        stack_name = self.settings.stack_name(self.project_name)
        self._write(project_path, "samconfig.toml", resources.SAMCONFIG.format(
            stack_name=stack_name,
            region=self.settings.region,
        ))
        self._write(project_path, "package.json",
                    json.dumps(boilerplate.package_json(self.project_name, stack_name), indent=4) + "\n")
        self._write(project_path, "tsconfig.json", boilerplate.TSCONFIG)
        self._write(project_path, "jest.config.js", boilerplate.JEST_CONFIG)

        if self.env_file and os.path.isfile(self.env_file):
            target = os.path.join(project_path, ENV_FILE)
            if os.path.abspath(self.env_file) != os.path.abspath(target):
                shutil.copyfile(self.env_file, target)

        project = SamProject(project_path, self.settings)
        project.sources.write_initial_lambda(self.function_name, to_camel_case(self.function_name))
        logger.info("Generated project %s in %s", self.project_name, project_path)

        api = gateway_name(self.api_name)
        if self.template_name == "basic-auth":
            add_basic_auth(project, api)
        elif self.template_name == "cognito-auth":
            add_cognito_auth(project, api, self.pool_name)
        return project

    @staticmethod
    def _write(project_path: str, name: str, content: str):
        with open(os.path.join(project_path, name), "w", encoding="utf-8") as f:
            f.write(content)

    def to_dict(self) -> Dict:
        """Export configuration as dictionary for saving/loading."""
        return {
            "project_name": self.project_name,
            "function_name": self.function_name,
            "api_name": self.api_name,
            "timeout": self.timeout,
            "env_vars": self.env_vars,
            "template": self.template_name,
            "architecture": self.architecture,
            "env_file": self.env_file,
            "pool_name": self.pool_name,
        }

    @classmethod
    def from_dict(cls, config: Dict, settings: Optional[Settings] = None) -> "ProjectGenerator":
        """Create generator from configuration dictionary."""
        gen = cls(config["project_name"], settings)
        gen.set_function(
            config.get("function_name", gen.function_name),
            timeout=int(config.get("timeout", gen.timeout)),
            env_vars=config.get("env_vars", []),
        )
        gen.set_api(config.get("api_name", gen.api_name))
        gen.set_template(config.get("template", "basic"), config.get("pool_name", "main"))
        gen.architecture = config.get("architecture", gen.architecture)
        gen.env_file = config.get("env_file", gen.env_file)
        return gen

    @classmethod
    def from_json(cls, json_path: str, settings: Optional[Settings] = None) -> "ProjectGenerator":
        """Load generator configuration from JSON file."""
        with open(json_path, "r") as f:
            config = json.load(f)
        return cls.from_dict(config, settings)

    def to_json(self, json_path: str):
        """Save generator configuration to JSON file."""
        with open(json_path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
