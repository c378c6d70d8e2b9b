"""Interpreter configuration loaded from .scriptshell/config.yaml."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from scriptshell.core.models import ConfigError

CONFIG_DIR = ".scriptshell"
CONFIG_FILE = "config.yaml"

DEFAULT_CONFIG_YAML = """# ScriptShell configuration for this project

# Prompt shown by the interactive shell
prompt: "> "

# Line that ends the current script (or the interactive session)
exit_command: exit

# Lines starting with this prefix are ignored
comment_prefix: "#"

# Composite verbs that run a nested script
serial_verb: SERIAL
parallel_verb: PARALLEL

# References starting with this prefix are fetched over the network
remote_prefix: "http://"
connect_timeout: 10.0  # seconds

# Working directory and extra environment for spawned commands
workdir: null
env: {}
"""


class ShellConfig(BaseModel):
    """Settings for the interpreter and the commands it spawns."""

    model_config = {"extra": "forbid"}

    prompt: str = "> "
    exit_command: str = "exit"
    comment_prefix: str = Field(default="#", min_length=1)
    serial_verb: str = Field(default="SERIAL", min_length=1)
    parallel_verb: str = Field(default="PARALLEL", min_length=1)
    remote_prefix: str = Field(default="http://", min_length=1)
    connect_timeout: float = Field(default=10.0, gt=0)
    workdir: Path | None = None
    env: dict[str, str] = Field(default_factory=dict)


def default_config_path(repo_path: Path) -> Path:
    return repo_path / CONFIG_DIR / CONFIG_FILE


def load_config(repo_path: Path, config_path: Path | None = None) -> ShellConfig:
    """Load configuration, falling back to defaults when no file exists.

    An explicit config_path must exist; the default location is optional.

    Raises:
        ConfigError: If the file is missing (explicit path only), is not
            valid YAML, or does not match the schema.
    """
    path = config_path or default_config_path(repo_path)
    if not path.exists():
        if config_path is not None:
            raise ConfigError(f"Config file not found: {path}")
        return ShellConfig()

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return ShellConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    try:
        return ShellConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e
