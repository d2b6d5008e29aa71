"""
A sam-smith project on disk: template.yaml, .env and src/.

Every mutation runs inside SamProject.transaction(): the template is read
fresh, edited in memory, checked and written back only if nothing raised.
"""

import logging
import os
import re
from contextlib import contextmanager
from typing import Iterator, Optional

from .config import Settings
from .document import Node
from .errors import ResourceNotFoundError, SamSmithError
from .sources import SourceTree
from .template import Template

logger = logging.getLogger(__name__)

TEMPLATE_FILE = "template.yaml"
ENV_FILE = ".env"
SRC_DIR = "src"


def safe_name(name: str) -> str:
    """Strip everything CloudFormation does not allow in a logical ID."""
    return re.sub(r"[^a-zA-Z0-9]", "", name)


def check_name(name: str, label: str) -> str:
    """Logical IDs are alphanumeric; reject anything else before editing."""
    if not name or safe_name(name) != name:
        raise SamSmithError(f"Invalid {label} name '{name}': use letters and digits only")
    return name


def to_pascal_case(name: str) -> str:
    """Convert string to PascalCase."""
    words = re.split(r"[\s_\-]+", name)
    return "".join(word[:1].upper() + word[1:] for word in words if word)


def to_camel_case(name: str) -> str:
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


class SamProject:
    """
    Paths and transactions for one generated project.

    Usage:
        project = SamProject("./my-app")
        with project.transaction() as template:
            template.remove_resource("OldFunction")
    """

    def __init__(self, path: str, settings: Optional[Settings] = None):
        self.path = os.path.abspath(path)
        self.name = os.path.basename(self.path.rstrip(os.sep))
        self.settings = settings or Settings.from_env(os.path.join(self.path, ENV_FILE))
        self.sources = SourceTree(os.path.join(self.path, SRC_DIR))

    @property
    def template_path(self) -> str:
        return os.path.join(self.path, TEMPLATE_FILE)

    @property
    def env_path(self) -> str:
        return os.path.join(self.path, ENV_FILE)

    def load_template(self) -> Template:
        return Template.load(self.template_path)

    @contextmanager
    def transaction(self) -> Iterator[Template]:
        """Load the template, yield it for editing and save it on success."""
        template = self.load_template()
        yield template
        template.check()
        template.save(self.template_path)
        logger.debug("Saved %s", self.template_path)

    @staticmethod
    def function_resource(template: Template, name: str) -> Node:
        """
        Resolve a Lambda by resource name or by the name it was created with.

        Raises:
            ResourceNotFoundError: neither name nor nameFunction is a Lambda
        """
        lambdas = {node.key: node for node in template.lambdas()}
        for candidate in (name, f"{name}Function"):
            if candidate in lambdas:
                return lambdas[candidate]
        raise ResourceNotFoundError(f"Lambda {name} not found in template")
