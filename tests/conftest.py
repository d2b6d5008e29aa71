"""
Shared fixtures: a freshly generated project in a temporary directory.
"""

import pytest

from sam_smith.config import Settings
from sam_smith.generator import ProjectGenerator


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the caller's shell settings out of generated names."""
    for name in ("ENVIRONMENT", "AWS_REGION", "SAM_SMITH_SSM_PREFIX", "SAM_SMITH_RUNTIME",
                 "SAM_SMITH_ARCHITECTURE", "DOTENV_CONFIG_PATH"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / "source.env"
    path.write_text("A1=1\nA2=2\nA3=3\n")
    return path


@pytest.fixture
def generator(env_file, settings):
    gen = ProjectGenerator("myapp", settings)
    gen.env_file = str(env_file)
    gen.set_function("myapp", timeout=60, env_vars=["A1", "A3"])
    return gen


@pytest.fixture
def project(tmp_path, generator):
    """Generated project: myappFunction (A1, A3) behind myappApi with GET /hello."""
    return generator.generate(str(tmp_path))


@pytest.fixture
def template_text(project):
    def read():
        with open(project.template_path) as f:
            return f.read()
    return read
