from types import SimpleNamespace

import pytest

from rolling_deployer.config import (
    DEFAULT_COMPOSE_FILE,
    DEFAULT_SOCKET_PATH,
    Config,
    ConfigError,
    parse_env_file,
    show_configuration_help,
)


def _cli(env_file, **overrides):
    values = dict(
        name=None,
        repo_url=None,
        clone_path=None,
        mount_path=None,
        compose_file=DEFAULT_COMPOSE_FILE,
        socket_path=DEFAULT_SOCKET_PATH,
        env_file=str(env_file),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def _write_env(path, lines):
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_parse_env_file_skips_comments_and_trims(tmp_path):
    env = _write_env(
        tmp_path / ".env",
        ["# comment", "", "  NAME = proj  ", "NOEQUALS", "URL=a=b"],
    )
    assert parse_env_file(env) == {"NAME": "proj", "URL": "a=b"}


def test_parse_env_file_missing_raises(tmp_path):
    with pytest.raises(OSError):
        parse_env_file(tmp_path / "missing.env")


def test_cli_values_take_precedence(tmp_path):
    env = _write_env(
        tmp_path / ".env",
        [
            "NAME=env_name",
            "REPO_URL=env_repo",
            "CLONE_PATH=env_clone",
            "MOUNT_PATH=env_mount",
            "COMPOSE_FILE=env-compose.yml",
            "SOCKET_PATH=env.sock",
        ],
    )
    cli = _cli(
        env,
        name="cli_name",
        repo_url="cli_repo",
        clone_path="cli_clone",
        mount_path="cli_mount",
        compose_file="cli-compose.yml",
        socket_path="cli.sock",
    )
    config = Config.from_env_and_cli(cli)
    assert config == Config(
        repo_url="cli_repo",
        clone_path="cli_clone",
        compose_file="cli-compose.yml",
        mount_path="cli_mount",
        name="cli_name",
        socket_path="cli.sock",
    )


def test_env_values_used_when_cli_missing(tmp_path):
    env = _write_env(
        tmp_path / ".env",
        [
            "NAME=env_name",
            "REPO_URL=env_repo",
            "CLONE_PATH=env_clone",
            "MOUNT_PATH=env_mount",
            "COMPOSE_FILE=env-compose.yml",
            "SOCKET_PATH=env.sock",
        ],
    )
    config = Config.from_env_and_cli(_cli(env))
    assert config.name == "env_name"
    assert config.repo_url == "env_repo"
    assert config.clone_path == "env_clone"
    assert config.mount_path == "env_mount"
    assert config.compose_file == "env-compose.yml"
    assert config.socket_path == "env.sock"


def test_defaults_kept_when_env_lacks_them(tmp_path):
    env = _write_env(
        tmp_path / ".env",
        ["NAME=n", "REPO_URL=r", "CLONE_PATH=c", "MOUNT_PATH=m"],
    )
    config = Config.from_env_and_cli(_cli(env))
    assert config.compose_file == DEFAULT_COMPOSE_FILE
    assert config.socket_path == DEFAULT_SOCKET_PATH


@pytest.mark.parametrize(
    "missing, flag",
    [
        ("REPO_URL", "repo-url"),
        ("CLONE_PATH", "clone-path"),
        ("MOUNT_PATH", "mount-path"),
        ("NAME", "name"),
    ],
)
def test_missing_required_value_raises(tmp_path, missing, flag):
    lines = [
        f"{key}=x"
        for key in ("REPO_URL", "CLONE_PATH", "MOUNT_PATH", "NAME")
        if key != missing
    ]
    env = _write_env(tmp_path / ".env", lines)
    with pytest.raises(ConfigError) as info:
        Config.from_env_and_cli(_cli(env))
    assert str(info.value) == (
        f"{missing} not provided. Use --{flag} flag or set {missing} in .env file"
    )


def test_missing_env_file_is_ignored(tmp_path):
    cli = _cli(
        tmp_path / "nope.env",
        name="n",
        repo_url="r",
        clone_path="c",
        mount_path="m",
    )
    config = Config.from_env_and_cli(cli)
    assert (config.name, config.repo_url) == ("n", "r")


def test_empty_cli_string_counts_as_given(tmp_path):
    env = _write_env(
        tmp_path / ".env",
        ["NAME=env_name", "REPO_URL=r", "CLONE_PATH=c", "MOUNT_PATH=m"],
    )
    config = Config.from_env_and_cli(_cli(env, name=""))
    assert config.name == ""


def test_show_configuration_help(capsys):
    show_configuration_help()
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Configuration options:"
    assert out[-1] == "Command line flags take precedence over .env file values."
    assert "     MOUNT_PATH=/etc/traefik/dynamic" in out