"""
.env file handling.

KEY=value lines, # comments and blank lines ignored. ENVIRONMENT names the
deployment stage and is never wired into Lambdas.
"""

import logging
import os
import re
from collections import namedtuple
from typing import Dict

from dotenv import dotenv_values

from .errors import SamSmithError, TemplateIOError

logger = logging.getLogger(__name__)

RESERVED_KEYS = ("ENVIRONMENT",)

# Keys become the Env<Name> and Param<Name> logical IDs, which CloudFormation
# restricts to letters and digits.
VARIABLE_NAME = re.compile(r"^[A-Za-z0-9]+$")

EnvChanges = namedtuple("EnvChanges", ["new", "removed", "changed"])


def read_env_file(path: str, required: bool = True) -> Dict[str, str]:
    """
    Read variables available for Lambda wiring.

    Args:
        path: Path to the .env file
        required: Raise when the file is missing instead of returning {}

    Returns:
        Ordered {name: value} without reserved keys

    Raises:
        SamSmithError: A key is not alphanumeric
    """
    if not os.path.isfile(path):
        if required:
            raise TemplateIOError(f".env file not found: {path}")
        return {}

    values = {}
    for key, value in dotenv_values(path, interpolate=False).items():
        if key in RESERVED_KEYS:
            continue
        if not VARIABLE_NAME.match(key):
            raise SamSmithError(
                f"Invalid variable name {key!r} in {path}: use letters and digits only (e.g. DBHOST for DB_HOST)"
            )
        values[key] = value if value is not None else ""
    logger.debug("Read %d variables from %s", len(values), path)
    return values


def compute_env_changes(env: Dict[str, str], parameters: Dict[str, str]) -> EnvChanges:
    """
    Compare .env values against the template's Env<Name> parameter defaults.

    Returns:
        EnvChanges of three disjoint name lists, each in source order
    """
    new = [name for name in env if name not in parameters]
    removed = [name for name in parameters if name not in env]
    changed = [name for name in env if name in parameters and env[name] != parameters[name]]
    return EnvChanges(new, removed, changed)
