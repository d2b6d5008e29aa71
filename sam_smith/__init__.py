"""
sam-smith - Scaffold and evolve TypeScript AWS SAM projects

A Python library and CLI tool that generates a SAM project and then edits its
template.yaml in place, keeping every line it does not touch exactly as
written and keeping src/ in step with the template.

Usage:
    sam-smith create                    # Interactive generator
    sam-smith create --config app.json  # From config file
    sam-smith update ./my-app           # Edit an existing project
"""

__version__ = "1.0.0"
__author__ = "DevOps Team"

from .config import Settings
from .errors import (
    ConflictError,
    ResourceNotFoundError,
    SamSmithError,
    TemplateIOError,
    TemplateStructureError,
)
from .generator import ProjectGenerator
from .project import SamProject
from .template import Template

__all__ = [
    "ConflictError",
    "ProjectGenerator",
    "ResourceNotFoundError",
    "SamProject",
    "SamSmithError",
    "Settings",
    "Template",
    "TemplateIOError",
    "TemplateStructureError",
]
