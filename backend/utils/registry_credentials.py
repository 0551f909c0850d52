"""
Registry Credentials Utility

Credential lookup for image pulls. Static credentials (REPO_USER/REPO_PASS)
win; otherwise the docker client config (config.json, including credential
helpers) is consulted through docker.auth.

An empty result means an anonymous pull. Lookup failures raise
RegistryAuthError; they are never treated as "no credentials".
"""

import logging
import os
from functools import partial
from typing import Callable, Dict, Optional

import docker
from docker import auth

from container.errors import RegistryAuthError

logger = logging.getLogger(__name__)

CredentialsResolver = Callable[[str], Optional[Dict[str, str]]]


def registry_for_image(image_name: str) -> str:
    """
    Extract the registry hostname from an image reference.

    Examples:
        nginx:1.25 → docker.io
        ghcr.io/user/app:latest → ghcr.io
        registry.example.com:5000/app:v1 → registry.example.com:5000
    """
    try:
        registry, _ = auth.resolve_repository_name(image_name)
    except docker.errors.DockerException as e:
        raise RegistryAuthError(f"Invalid image reference {image_name}: {e}") from e
    return registry.lower()


def get_registry_credentials(
    image_name: str,
    config_path: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> Optional[Dict[str, str]]:
    """
    Get pull credentials for the registry serving image_name.

    Args:
        image_name: Full image reference (e.g., "nginx:1.25", "ghcr.io/user/app:latest")
        config_path: Docker config.json to read; None uses the docker client default
        username: Static registry username (REPO_USER)
        password: Static registry password (REPO_PASS)

    Returns:
        auth_config dict for APIClient.pull, or None for an anonymous pull

    Raises:
        RegistryAuthError: Reference is invalid, the configured config file is
            missing, or a credential helper failed
    """
    registry = registry_for_image(image_name)

    if username and password:
        logger.debug(f"Using static credentials for registry '{registry}'")
        return {"username": username, "password": password, "serveraddress": registry}

    if config_path and not os.path.isfile(config_path):
        raise RegistryAuthError(f"Docker config file not found: {config_path}")

    try:
        auth_config = auth.load_config(config_path=config_path)
        credentials = auth_config.resolve_authconfig(registry)
    except docker.errors.DockerException as e:
        raise RegistryAuthError(f"Failed to resolve credentials for {registry}: {e}") from e

    if not credentials:
        logger.debug(f"No credentials found for registry '{registry}' (image: {image_name})")
        return None

    logger.debug(f"Using stored credentials for registry '{registry}'")
    return dict(credentials)


def credentials_resolver(settings) -> CredentialsResolver:
    """Bind get_registry_credentials to the configured credential sources."""
    return partial(
        get_registry_credentials,
        config_path=settings.docker_config_path,
        username=settings.repo_user,
        password=settings.repo_pass,
    )
