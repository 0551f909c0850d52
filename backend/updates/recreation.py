"""
Container recreation.

Creates and starts a replacement for a removed container from its snapshot,
restoring every network it was attached to.

The daemon accepts only one network at creation time
(see https://github.com/docker/docker/issues/29265), so the container is
created on a single network, disconnected from it, and then connected to all
original networks with their original endpoint settings. Failures are raised
as-is; a half-connected container is left for the caller to deal with.
"""

import logging

from container.daemon import DaemonClient
from container.models import Container
from utils.container_id import short_container_id
from utils.network_helpers import (
    creation_networking_config,
    prune_endpoint,
    select_creation_network,
)

logger = logging.getLogger(__name__)


class RecreationEngine:
    """Builds a new container from an old container's captured configuration."""

    def __init__(self, daemon: DaemonClient):
        self.daemon = daemon

    def recreate(self, container: Container) -> str:
        """
        Create and start a container replicating `container`.

        Returns:
            ID of the new container

        Raises:
            NotFoundError, TransportError: Any daemon call failed
        """
        config = container.runtime_config()
        host_config = container.host_config()
        name = container.name

        # The old short id is an auto-generated alias; the new container gets its own
        endpoints = {
            network: prune_endpoint(endpoint, exclude_aliases=[container.short_id])
            for network, endpoint in container.network_endpoints.items()
        }

        creation_network = select_creation_network(endpoints)
        networking_config = creation_networking_config(
            creation_network, endpoints.get(creation_network)
        )

        logger.info(f"Creating {name}")
        new_id = self.daemon.create_container(config, host_config, networking_config, name)
        label = f"{name} ({short_container_id(new_id)})"

        # host and none attach to a fixed daemon network that cannot be swapped
        if not (container.is_host_network or container.is_network_disabled) and creation_network is not None:
            self._restore_networks(new_id, label, creation_network, endpoints)

        logger.debug(f"Starting container {label}")
        self.daemon.start_container(new_id)

        return new_id

    def _restore_networks(self, container_id: str, label: str, creation_network: str, endpoints: dict) -> None:
        logger.debug(f"Disconnecting {label} from creation network {creation_network}")
        self.daemon.disconnect_network(creation_network, container_id, force=True)

        for network, endpoint in endpoints.items():
            logger.debug(f"Connecting {label} to network {network}")
            self.daemon.connect_network(network, container_id, endpoint)
