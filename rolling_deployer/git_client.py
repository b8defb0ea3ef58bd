"""Git operations for fetching versioned configuration checkouts."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

log = logging.getLogger(__name__)


class GitError(Exception):
    """Raised when a git command fails."""


def _run_git(args: list[str], action: str, cwd: str | None = None) -> None:
    try:
        result = subprocess.run(["git", *args], cwd=cwd, capture_output=True)
    except OSError as exc:
        raise GitError(f"{action} failed: {exc}") from exc
    if result.returncode != 0:
        stderr = (result.stderr or b"").decode("utf-8", errors="replace")
        raise GitError(f"{action} failed: {stderr}")


class GitClient:
    """Clones and updates configuration repositories with the git command."""

    def clone_repository_to_versioned_path(
        self, repo_url: str, tag: str, base_path: str
    ) -> str:
        """Clone ``tag`` into a versioned directory and point ``current`` at it.

        Returns the path of the ``current`` symlink.
        """
        versioned_path = f"{base_path}/traefik-config-{tag}"
        symlink_path = f"{base_path}/current"

        log.info("Cloning repository %s at tag %s to %s", repo_url, tag, versioned_path)
        Path(versioned_path).parent.mkdir(parents=True, exist_ok=True)

        if not os.path.exists(versioned_path):
            _run_git(
                ["clone", "--depth", "1", "--branch", tag, repo_url, versioned_path],
                "Git clone",
            )
            log.info(
                "Successfully cloned %s at tag %s to %s", repo_url, tag, versioned_path
            )
        else:
            log.info("Using existing config at %s", versioned_path)

        if os.path.lexists(symlink_path):
            os.remove(symlink_path)
        os.symlink(versioned_path, symlink_path, target_is_directory=True)
        return symlink_path

    def fetch_latest(self, repo_dir: str) -> None:
        """Fetch all remotes in ``repo_dir``."""
        log.info("Fetching latest changes in %s", repo_dir)
        _run_git(["fetch", "--all"], "Git fetch", cwd=repo_dir)

    def checkout_tag(self, repo_dir: str, tag: str) -> None:
        """Check out ``tag`` in ``repo_dir``."""
        log.info("Checking out tag %s in %s", tag, repo_dir)
        _run_git(["checkout", tag], "Git checkout", cwd=repo_dir)
        log.info("Successfully checked out tag %s", tag)