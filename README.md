# rolling-deployer

Deploy a new version of a Traefik configuration repository and roll the
containers that use it.

For a given tag, `rolling-deployer`:

1. Shallow-clones the configuration repository at that tag into
   `<clone-path>/traefik-config-<tag>` (reusing the directory if it is
   already there) and points the `<clone-path>/current` symlink at it.
2. Rewrites the Docker Compose file so that the volume mounted at
   `<mount-path>` takes its source from the `current` symlink. Only the first
   service that has a `volumes` list is changed; if none of its volumes
   targets `<mount-path>`, a `<current>:<mount-path>:rw` entry is appended.
   If no service has a `volumes` list the file is left alone. The file is
   written back through PyYAML, so comments are not kept.
3. Rolls the service:
   - in Compose mode, asks the Docker daemon (over its Unix socket) for the
     running containers whose image name contains the project name, and runs
     `docker compose -f <compose-file> up -d --force-recreate <service>` for
     each one. The service is taken from the `com.docker.compose.service`
     label, or else parsed from the container name
     (`project_service_index` or `something-service-index`);
   - in Swarm mode (`--swarm`), runs
     `docker service update --mount-rm <mount-path> --mount-add type=bind,src=<current>,dst=<mount-path> <name>`.
4. Deletes older `traefik-config-*` directories under the clone path,
   keeping the three newest.

## Installation

```
pip install .
```

`git` and `docker` must be on `PATH`, and for Compose mode the Docker socket
must be reachable.

## Usage

```
rolling-deployer v1.2.3 \
    --name my-project \
    --repo-url https://git.example.com/org/traefik-config.git \
    --clone-path /opt/traefik-configs \
    --mount-path /etc/traefik/dynamic \
    --compose-file ./docker-compose.yml \
    --socket-path /var/run/docker.sock
```

| Option | Default | Meaning |
| --- | --- | --- |
| `TAG` | (required) | Git tag to deploy |
| `-n`, `--name` | | Project name; matched against container image names, and the Swarm service name |
| `-r`, `--repo-url` | `https://example.com/org/traefik-config.git` | Configuration repository to clone |
| `-c`, `--clone-path` | `/opt/dev` | Directory that holds the versioned clones |
| `--mount-path` | | Path in the container where the config is mounted (required) |
| `--compose-file` | `docker-compose.yml` | Compose file to update |
| `-s`, `--socket-path` | `/var/run/docker.sock` | Docker API socket |
| `-e`, `--env-file` | `.env` | File of fallback settings |
| `--swarm` | off | Use Docker Swarm instead of Compose |
| `-v`, `--verbose` | | Repeat for more logging (`-v` info, `-vv` debug) |

### The `.env` file

Settings not given on the command line are looked up in the env file:

```
CLONE_PATH=/opt/traefik-configs
MOUNT_PATH=/etc/traefik/dynamic
COMPOSE_FILE=./docker-compose.yml
NAME=my-project
SOCKET_PATH=/var/run/docker.sock
```

Each line is `KEY=VALUE`; blank lines and lines starting with `#` are
ignored, and spaces around keys and values are trimmed. Command-line values
take precedence; `--compose-file` and `--socket-path` fall back to the file
only while they hold their defaults.

Because `--repo-url` always has a value on the command line, a `REPO_URL`
line in the env file is not used by the `rolling-deployer` command; pass
`--repo-url` instead. It is used when a `CLI` object is built in code with
`repo_url=None`.

If no mount path is given anywhere, the command prints
`MOUNT_PATH must be set via --mount-path or in the .env file` to standard
error and stops. If a project name is missing, it prints a summary of the
configuration options.

Setting the environment variable `SKIP_DEPLOY=1` makes the command return
at once without doing anything.

Failures are logged; the command's exit status does not reflect them. From
Python, `rolling_deployer.cli.deploy(cli)` returns `True` on success (or
when skipped) and `False` otherwise.

## Library use

```python
from rolling_deployer.config import Config
from rolling_deployer.deployment_manager import DeploymentManager

config = Config(
    repo_url="https://git.example.com/org/traefik-config.git",
    clone_path="/opt/traefik-configs",
    compose_file="docker-compose.yml",
    mount_path="/etc/traefik/dynamic",
    name="my-project",
    socket_path="/var/run/docker.sock",
)
DeploymentManager(config).rolling_deploy("v1.2.3", swarm=False)
```

The modules:

- `rolling_deployer.cli`: `CLI`, `parse_args`, `deploy`, `main`.
- `rolling_deployer.config`: `Config` (with `Config.from_env_and_cli`),
  `parse_env_file`, `show_configuration_help`, `ConfigError`.
- `rolling_deployer.deployment_manager`: `DeploymentManager` (with
  `rolling_deploy`, `rollback` and `cleanup_old_configs`),
  `extract_service_name`, `update_compose_file_volume_source`,
  `DeploymentError`.
- `rolling_deployer.git_client`: `GitClient` (with
  `clone_repository_to_versioned_path`, `fetch_latest`, `checkout_tag`),
  `GitError`.
- `rolling_deployer.docker_client`: `DockerClient` (with `list_containers`,
  `get_running_containers_by_image_substring`,
  `get_running_containers_by_name`, `start_container`, `stop_container`,
  `remove_container`), `extract_body`, `clean_chunked_response`,
  `DockerError`.
- `rolling_deployer.types`: dataclasses for Docker API objects (`Container`,
  `Image`, `Port`, `Mount`, `HostConfig`, `NetworkSettings`, `Network`), each
  with a `from_dict` constructor that raises `ValueError` on malformed data.

Failures are raised as `DeploymentError`, `GitError`, `DockerError` or
`ConfigError`; file-system problems surface as `OSError`.

## What it does not do

- There is no command-line option for rolling back; `DeploymentManager.rollback`
  is available only from Python.
- The Docker client speaks plain HTTP over a local Unix socket only; it does
  not connect to remote daemons over TCP or TLS.
- Nothing is checked after containers are recreated: there are no health
  checks and no automatic rollback on failure.