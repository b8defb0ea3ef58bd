"""Rolling deployment of a new configuration version to running services."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Any

import yaml

from rolling_deployer.config import Config
from rolling_deployer.docker_client import DockerClient
from rolling_deployer.git_client import GitClient

_CONFIG_DIR_PREFIX = "traefik-config-"
_U32_MAX = 2**32 - 1


class DeploymentError(Exception):
    """Raised when a deployment step fails."""


def _is_u32(text: str) -> bool:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not digits.isascii() or not digits.isdigit():
        return False
    return int(digits) <= _U32_MAX


def extract_service_name(container: Any) -> str:
    """Work out the compose service a container belongs to.

    The compose service label wins; otherwise the name is parsed as
    ``project_service_index`` or ``something-service-index``.
    """
    labels = container.labels
    if labels and "com.docker.compose.service" in labels:
        return labels["com.docker.compose.service"]
    if not container.names:
        return ""
    name = container.names[0].lstrip("/")
    underscore_parts = name.split("_")
    if len(underscore_parts) >= 3:
        return underscore_parts[-2]
    dash_parts = name.split("-")
    if len(dash_parts) >= 2 and _is_u32(dash_parts[-1]):
        return dash_parts[-2]
    return name


def _retarget_volumes(volumes: list[Any], symlink_path: str, mount_path: str) -> None:
    for index, volume in enumerate(volumes):
        if isinstance(volume, str):
            parts = volume.split(":")
            if len(parts) >= 2 and parts[1] == mount_path:
                new_volume = f"{symlink_path}:{mount_path}"
                if len(parts) > 2:
                    new_volume += f":{parts[2]}"
                volumes[index] = new_volume
                return
        elif isinstance(volume, dict):
            target = volume.get("target")
            if isinstance(target, str) and target == mount_path:
                volume["source"] = symlink_path
                return
    volumes.append(f"{symlink_path}:{mount_path}:rw")


def update_compose_file_volume_source(
    compose_file: str, symlink_path: str, mount_path: str
) -> None:
    """Point the volume mounted at ``mount_path`` to ``symlink_path``.

    Only the first service that has a volume list is changed; when none of
    its volumes targets ``mount_path`` a read-write bind is appended.
    """
    content = Path(compose_file).read_text(encoding="utf-8")
    try:
        doc = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise DeploymentError(f"invalid compose file {compose_file}: {exc}") from exc

    services = doc.get("services") if isinstance(doc, dict) else None
    if not isinstance(services, dict):
        return
    for service in services.values():
        volumes = service.get("volumes") if isinstance(service, dict) else None
        if isinstance(volumes, list):
            _retarget_volumes(volumes, symlink_path, mount_path)
            Path(compose_file).write_text(
                yaml.safe_dump(doc, sort_keys=False), encoding="utf-8"
            )
            return


def _creation_time(path: Path) -> float:
    try:
        st = path.stat()
    except OSError:
        return 0.0
    return getattr(st, "st_birthtime", st.st_ctime)


class DeploymentManager:
    """Rolls services over to a freshly cloned configuration version."""

    def __init__(
        self,
        config: Config,
        docker: DockerClient | None = None,
        git: GitClient | None = None,
    ) -> None:
        self.config = config
        self.docker = docker if docker is not None else DockerClient(config.socket_path)
        self.git = git if git is not None else GitClient()

    def rolling_deploy(self, tag: str, swarm: bool) -> None:
        """Deploy ``tag`` by updating the swarm service or recreating containers."""
        config = self.config
        print(
            f"Starting rolling deployment for project '{config.name}' with tag '{tag}'"
        )

        symlink_path = self.git.clone_repository_to_versioned_path(
            config.repo_url, tag, config.clone_path
        )
        update_compose_file_volume_source(
            config.compose_file, symlink_path, config.mount_path
        )

        if swarm:
            self._update_swarm_service(symlink_path)
        else:
            self._recreate_containers()

        self.cleanup_old_configs(config.clone_path, 3)
        print("Rolling deployment completed successfully!")

    def _update_swarm_service(self, symlink_path: str) -> None:
        config = self.config
        service = config.name
        print(f"Swarm mode: updating service '{service}' mount to new config path.")
        add_arg = f"type=bind,src={symlink_path},dst={config.mount_path}"
        result = subprocess.run(
            [
                "docker",
                "service",
                "update",
                "--mount-rm",
                config.mount_path,
                "--mount-add",
                add_arg,
                service,
            ]
        )
        if result.returncode != 0:
            raise DeploymentError(f"docker service update failed for service {service}")
        print(f"Successfully updated service '{service}' in Swarm mode.")

    def _recreate_containers(self) -> None:
        config = self.config
        containers = self.docker.get_running_containers_by_image_substring(config.name)
        if not containers:
            raise DeploymentError(
                f"No running containers found for project '{config.name}'"
            )
        print(f"Found {len(containers)} running Traefik containers")

        for container in containers:
            service_name = extract_service_name(container)
            print(f"Rolling service: {service_name}")

            compose_file_abs = Path(config.compose_file).resolve(strict=True)
            compose_dir = compose_file_abs.parent
            if not compose_dir.exists():
                raise DeploymentError(
                    f"Compose directory does not exist: {compose_dir}"
                )

            result = subprocess.run(
                [
                    "docker",
                    "compose",
                    "-f",
                    str(compose_file_abs),
                    "up",
                    "-d",
                    "--force-recreate",
                    service_name,
                ],
                cwd=compose_dir,
            )
            if result.returncode != 0:
                raise DeploymentError(
                    f"docker compose up failed for service {service_name}"
                )
            print(f"Successfully rolled {service_name} to new version")

    def cleanup_old_configs(self, base_path: str, keep_versions: int) -> None:
        """Remove versioned config directories beyond the newest ``keep_versions``."""
        try:
            entries = list(os.scandir(base_path))
        except OSError:
            entries = []
        config_dirs = [
            Path(entry.path)
            for entry in entries
            if entry.name.startswith(_CONFIG_DIR_PREFIX) and Path(entry.path).is_dir()
        ]
        config_dirs.sort(key=_creation_time)
        config_dirs.reverse()

        for old_config in config_dirs[keep_versions:]:
            print(f'Cleaning up old config: "{old_config}"')
            try:
                shutil.rmtree(old_config)
            except OSError as exc:
                print(
                    f'Failed to remove old config "{old_config}": {exc}',
                    file=sys.stderr,
                )

    def rollback(self, project_name: str, tag: str, config: Config, swarm: bool) -> None:
        """Return the project to the configuration at ``tag``."""
        print(f"Starting rollback of project '{project_name}' to tag '{tag}'")
        target_config_path = f"{config.clone_path}/{_CONFIG_DIR_PREFIX}{tag}"
        if not os.path.exists(target_config_path):
            print("Target config not found locally, cloning...")
            self.git.clone_repository_to_versioned_path(
                config.repo_url, tag, config.clone_path
            )
        else:
            print(f"Using existing config at {target_config_path}")

        self.rolling_deploy(tag, swarm)
        print("Rollback completed successfully!")