"""A minimal Docker Engine API client speaking HTTP over a Unix socket."""

from __future__ import annotations

import json
import socket
import string

from rolling_deployer.types import Container

_HEX_DIGITS = frozenset(string.hexdigits)
_CHUNK_TRAILER = "\r\n0\r\n\r\n"


class DockerError(Exception):
    """Raised when the Docker daemon cannot be reached or answers badly."""


def clean_chunked_response(body: str) -> str:
    """Strip a leading chunk-size line and the final zero-length chunk."""
    cleaned = body
    first_newline = cleaned.find("\r\n")
    if first_newline != -1 and all(c in _HEX_DIGITS for c in cleaned[:first_newline]):
        cleaned = cleaned[first_newline + 2 :]
    if cleaned.endswith(_CHUNK_TRAILER):
        cleaned = cleaned[: -len(_CHUNK_TRAILER)]
    return cleaned


def extract_body(response: str) -> str:
    """Return the cleaned body of a raw HTTP response, or the response itself."""
    head_end = response.find("\r\n\r\n")
    if head_end == -1:
        return response
    return clean_chunked_response(response[head_end + 4 :])


class DockerClient:
    """Talks to the Docker daemon through its Unix socket."""

    def __init__(self, socket_path: str) -> None:
        self.socket_path = socket_path

    def _request(self, method: str, endpoint: str, body: str | None = None) -> str:
        if body is None:
            request = (
                f"{method} {endpoint} HTTP/1.1\r\n"
                "Host: localhost\r\n"
                "Connection: close\r\n\r\n"
            )
        else:
            request = (
                f"{method} {endpoint} HTTP/1.1\r\n"
                "Host: localhost\r\n"
                "Content-Type: application/json\r\n"
                f"Content-Length: {len(body.encode())}\r\n"
                "Connection: close\r\n\r\n"
                f"{body}"
            )
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.connect(self.socket_path)
                sock.sendall(request.encode())
                chunks = []
                while chunk := sock.recv(65536):
                    chunks.append(chunk)
        except OSError as exc:
            raise DockerError(
                f"cannot talk to Docker at {self.socket_path}: {exc}"
            ) from exc
        try:
            text = b"".join(chunks).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DockerError(f"Docker response is not valid UTF-8: {exc}") from exc
        return extract_body(text)

    def list_containers(self, all: bool = False) -> list[Container]:
        """List containers; with ``all`` stopped ones are included."""
        endpoint = "/containers/json?all=true" if all else "/containers/json"
        payload = self._request("GET", endpoint)
        try:
            items = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise DockerError(f"invalid container list: {exc}") from exc
        if not isinstance(items, list):
            raise DockerError("invalid container list: expected a JSON array")
        try:
            return [Container.from_dict(item) for item in items]
        except ValueError as exc:
            raise DockerError(f"invalid container list: {exc}") from exc

    def get_running_containers_by_image_substring(
        self, image_substring: str
    ) -> list[Container]:
        """Running containers whose image name contains ``image_substring``."""
        return [
            c
            for c in self.list_containers(True)
            if c.state == "running" and image_substring in c.image
        ]

    def get_running_containers_by_name(self, name: str) -> list[Container]:
        """Running containers having a name that contains ``name``."""
        return [
            c
            for c in self.list_containers(True)
            if c.state == "running" and any(name in n for n in c.names)
        ]

    def remove_container(self, container_id: str) -> None:
        """Force-remove a container."""
        self._request("DELETE", f"/containers/{container_id}?force=true")

    def stop_container(self, container_id: str) -> None:
        """Stop a container."""
        self._request("POST", f"/containers/{container_id}/stop", "")

    def start_container(self, container_id: str) -> None:
        """Start a container."""
        self._request("POST", f"/containers/{container_id}/start", "")