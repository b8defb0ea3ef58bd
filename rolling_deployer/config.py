"""Deployment settings gathered from command-line options and a .env file."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_SOCKET_PATH = "/var/run/docker.sock"
DEFAULT_COMPOSE_FILE = "docker-compose.yml"

_HELP_LINES = (
    "Configuration options:",
    "  1. Command line flags:",
    "     ./app v1.2.3 --name my-project --repo-url https://example.com/org/repo.git"
    " --mount-path /opt/configs --clone-path /opt/traefik-configs"
    " --compose-file ./docker-compose.yml --socket-path /var/run/docker.sock"
    " --env-file .env",
    "",
    "  2. Create a .env file (or use --env-file to specify a different file):",
    "     REPO_URL=https://example.com/your-org/traefik-config.git",
    "     CLONE_PATH=/opt/traefik-configs",
    "     MOUNT_PATH=/etc/traefik/dynamic",
    "     COMPOSE_FILE=./docker-compose.yml",
    "     NAME=my-project",
    "     SOCKET_PATH=/var/run/docker.sock",
    "",
    "Command line flags take precedence over .env file values.",
)


class ConfigError(Exception):
    """Raised when a required setting is missing."""


def parse_env_file(path: str | os.PathLike[str]) -> dict[str, str]:
    """Read ``KEY=VALUE`` lines from ``path``, skipping blanks and comments.

    Raises OSError or UnicodeDecodeError if the file cannot be read.
    """
    values: dict[str, str] = {}
    for raw in Path(path).read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if sep:
            values[key.strip()] = value.strip()
    return values


def _required(cli_value: str | None, env: dict[str, str], key: str, flag: str) -> str:
    if cli_value is not None:
        return cli_value
    if key in env:
        return env[key]
    raise ConfigError(
        f"{key} not provided. Use --{flag} flag or set {key} in .env file"
    )


def _with_default(cli_value: str, default: str, env: dict[str, str], key: str) -> str:
    if cli_value != default:
        return cli_value
    return env.get(key, cli_value)


@dataclass
class Config:
    """Everything a deployment needs to know."""

    repo_url: str
    clone_path: str
    compose_file: str
    mount_path: str
    name: str
    socket_path: str

    @classmethod
    def from_env_and_cli(cls, cli: Any) -> Config:
        """Build a config from parsed options, falling back to the .env file.

        Options set on ``cli`` take precedence over the file named by
        ``cli.env_file``; a missing or unreadable file is ignored.
        """
        env: dict[str, str] = {}
        if os.path.exists(cli.env_file):
            try:
                env = parse_env_file(cli.env_file)
            except (OSError, UnicodeDecodeError):
                env = {}

        repo_url = _required(cli.repo_url, env, "REPO_URL", "repo-url")
        clone_path = _required(cli.clone_path, env, "CLONE_PATH", "clone-path")
        mount_path = _required(cli.mount_path, env, "MOUNT_PATH", "mount-path")
        compose_file = _with_default(
            cli.compose_file, DEFAULT_COMPOSE_FILE, env, "COMPOSE_FILE"
        )
        name = _required(cli.name, env, "NAME", "name")
        socket_path = _with_default(
            cli.socket_path, DEFAULT_SOCKET_PATH, env, "SOCKET_PATH"
        )
        return cls(
            repo_url=repo_url,
            clone_path=clone_path,
            compose_file=compose_file,
            mount_path=mount_path,
            name=name,
            socket_path=socket_path,
        )


def show_configuration_help() -> None:
    """Print how the settings can be supplied."""
    for line in _HELP_LINES:
        print(line)