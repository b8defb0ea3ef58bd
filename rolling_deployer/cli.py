"""Command-line entry point for rolling out a new configuration version."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass, replace

from rolling_deployer.config import (
    DEFAULT_COMPOSE_FILE,
    DEFAULT_SOCKET_PATH,
    Config,
    ConfigError,
    parse_env_file,
    show_configuration_help,
)
from rolling_deployer.deployment_manager import DeploymentError, DeploymentManager
from rolling_deployer.docker_client import DockerError
from rolling_deployer.git_client import GitError

log = logging.getLogger(__name__)

DEFAULT_REPO_URL = "https://example.com/org/traefik-config.git"
DEFAULT_ENV_FILE = ".env"
DEFAULT_CLONE_PATH = "/opt/dev"

_MOUNT_PATH_MISSING = "MOUNT_PATH must be set via --mount-path or in the .env file"
_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO, 2: logging.DEBUG}


@dataclass
class CLI:
    """Options given on the command line."""

    tag: str
    name: str | None = None
    socket_path: str = DEFAULT_SOCKET_PATH
    repo_url: str | None = DEFAULT_REPO_URL
    clone_path: str | None = None
    mount_path: str | None = None
    verbose: int = 0
    compose_file: str = DEFAULT_COMPOSE_FILE
    env_file: str = DEFAULT_ENV_FILE
    swarm: bool = False


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rolling-deployer",
        description="Deploy a new version of traefik configs.",
    )
    parser.add_argument("tag", metavar="TAG")
    parser.add_argument("-n", "--name", default=None)
    parser.add_argument("-s", "--socket-path", default=DEFAULT_SOCKET_PATH)
    parser.add_argument("-r", "--repo-url", default=DEFAULT_REPO_URL)
    parser.add_argument(
        "-c", "--clone-path", default=None, help="Path to clone the config repo into"
    )
    parser.add_argument(
        "--mount-path",
        default=None,
        help="Target path in the container to mount the config "
        "(e.g. /etc/traefik/dynamic)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv, etc.)",
    )
    parser.add_argument("--compose-file", default=DEFAULT_COMPOSE_FILE)
    parser.add_argument(
        "-e", "--env-file", default=DEFAULT_ENV_FILE, help="Path to .env file"
    )
    parser.add_argument("--swarm", action="store_true", help="Use Docker Swarm mode")
    return parser


def parse_args(argv: list[str] | None = None) -> CLI:
    """Parse command-line arguments into a :class:`CLI`."""
    namespace = _build_parser().parse_args(argv)
    return CLI(**vars(namespace))


def extract_env_var_from_cli_or_env(
    val: str | None,
    env_content: dict[str, str],
    key: str,
    default_value: str,
) -> str:
    """Prefer a non-default command-line value, then the .env value, then the default."""
    val_str = val if val is not None else ""
    if val_str != "" and val_str != default_value:
        return val_str
    if key in env_content:
        return env_content[key]
    return default_value


def _configure_logging(verbose: int) -> None:
    logging.basicConfig(level=_LOG_LEVELS.get(verbose, logging.DEBUG))


def _resolve(cli: CLI, env_content: dict[str, str]) -> CLI:
    name = extract_env_var_from_cli_or_env(cli.name, env_content, "NAME", "")
    repo_url = extract_env_var_from_cli_or_env(
        cli.repo_url, env_content, "REPO_URL", ""
    )
    clone_path = extract_env_var_from_cli_or_env(
        cli.clone_path, env_content, "CLONE_PATH", DEFAULT_CLONE_PATH
    )
    mount_path = extract_env_var_from_cli_or_env(
        cli.mount_path, env_content, "MOUNT_PATH", ""
    )
    socket_path = (
        env_content.get("SOCKET_PATH", cli.socket_path)
        if cli.socket_path == DEFAULT_SOCKET_PATH
        else cli.socket_path
    )
    compose_file = (
        env_content.get("COMPOSE_FILE", cli.compose_file)
        if cli.compose_file == DEFAULT_COMPOSE_FILE
        else cli.compose_file
    )
    return replace(
        cli,
        name=name or None,
        repo_url=repo_url or None,
        clone_path=clone_path or None,
        mount_path=mount_path or None,
        socket_path=socket_path,
        compose_file=compose_file,
    )


def deploy(cli: CLI) -> bool:
    """Resolve settings and run a rolling deployment.

    Returns True when the deployment succeeded (or was skipped through the
    ``SKIP_DEPLOY=1`` environment variable) and False otherwise.
    """
    if os.environ.get("SKIP_DEPLOY") == "1":
        log.info("Skipping real deployment for test")
        return True

    try:
        env_content = parse_env_file(cli.env_file)
    except (OSError, UnicodeDecodeError) as exc:
        log.error("Error reading .env file: %s", exc)
        env_content = {}
    log.debug("env_content: %r", env_content)

    resolved = _resolve(cli, env_content)

    if resolved.mount_path is None:
        log.error(_MOUNT_PATH_MISSING)
        print(_MOUNT_PATH_MISSING, file=sys.stderr)
        return False
    log.debug("Mount path from CLI: %r", resolved.mount_path)

    try:
        config = Config.from_env_and_cli(resolved)
    except ConfigError as exc:
        log.error("Configuration error: %s", exc)
        log.info("")
        show_configuration_help()
        return False

    _configure_logging(resolved.verbose)
    log.info("Configuration loaded:")
    log.info("  Repository: %s", config.repo_url)
    log.info("  Clone path: %s", config.clone_path)
    log.info("  Mount path: %s", config.mount_path)

    manager = DeploymentManager(config)
    log.info(
        "Starting deployment for project '%s' with tag '%s'", config.name, resolved.tag
    )
    try:
        manager.rolling_deploy(resolved.tag, resolved.swarm)
    except (DeploymentError, GitError, DockerError, OSError, UnicodeError) as exc:
        log.error("Rolling deployment failed: %s", exc)
        return False
    log.info("Rolling deployment successful!")
    return True


def main(argv: list[str] | None = None) -> None:
    """Run the deployer with the given (or the process's) arguments."""
    deploy(parse_args(argv))


if __name__ == "__main__":
    main()