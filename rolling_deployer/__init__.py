"""Roll out new versions of a Traefik configuration to Docker Compose or Swarm services."""

__version__ = "0.2.17"