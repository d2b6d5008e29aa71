"""
Runtime settings for sam-smith.

Values come from the process environment first, then from the project's
.env file, then from the defaults below.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT = "dev"
DEFAULT_REGION = "us-east-1"
DEFAULT_SSM_PREFIX = "sam-smith"
DEFAULT_RUNTIME = "nodejs20.x"
DEFAULT_ARCHITECTURE = "arm64"
ARCHITECTURES = ("arm64", "x86_64")


@dataclass
class Settings:
    environment: str = DEFAULT_ENVIRONMENT
    region: str = DEFAULT_REGION
    ssm_prefix: str = DEFAULT_SSM_PREFIX
    runtime: str = DEFAULT_RUNTIME
    architecture: str = DEFAULT_ARCHITECTURE
    env_file: Optional[str] = None

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """
        Build settings from the environment.

        Args:
            env_file: Optional .env path; defaults to DOTENV_CONFIG_PATH or ./.env

        Returns:
            Settings instance
        """
        env_file = env_file or os.environ.get("DOTENV_CONFIG_PATH") or os.path.join(os.getcwd(), ".env")
        file_values = dotenv_values(env_file) if os.path.isfile(env_file) else {}

        environment = os.environ.get("ENVIRONMENT") or file_values.get("ENVIRONMENT") or DEFAULT_ENVIRONMENT
        architecture = os.environ.get("SAM_SMITH_ARCHITECTURE", DEFAULT_ARCHITECTURE)
        if architecture not in ARCHITECTURES:
            logger.warning("Unknown architecture %s, using %s", architecture, DEFAULT_ARCHITECTURE)
            architecture = DEFAULT_ARCHITECTURE

        return cls(
            environment=environment,
            region=os.environ.get("AWS_REGION", DEFAULT_REGION),
            ssm_prefix=os.environ.get("SAM_SMITH_SSM_PREFIX", DEFAULT_SSM_PREFIX),
            runtime=os.environ.get("SAM_SMITH_RUNTIME", DEFAULT_RUNTIME),
            architecture=architecture,
            env_file=env_file,
        )

    def stack_name(self, project_name: str) -> str:
        """CloudFormation stack name used by samconfig.toml."""
        return f"sam-smith-{project_name}-{self.environment}"
