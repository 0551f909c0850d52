"""
Container client facade.

ContainerClient is the single entry point callers use: it fetches snapshots
and delegates the update protocol to the staleness, shutdown, recreation and
command execution components, all sharing one DaemonClient.
"""

import logging
import time
from typing import Callable, List, Optional

from config.settings import Settings
from container.daemon import DaemonClient, DockerDaemon
from container.filters import Filter, no_filter
from container.models import Container
from updates.command_executor import CommandExecutor, ExecResult
from updates.recreation import RecreationEngine
from updates.shutdown import ShutdownSequencer
from updates.staleness import StalenessDetector
from utils.image_id import short_image_id
from utils.registry_credentials import CredentialsResolver, credentials_resolver

logger = logging.getLogger(__name__)


class ContainerClient:
    """Everything dockshift does to containers, over one daemon connection."""

    def __init__(
        self,
        daemon: DaemonClient,
        settings: Optional[Settings] = None,
        get_registry_credentials: Optional[CredentialsResolver] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            daemon: Daemon capability set
            settings: Runtime settings; defaults when omitted
            get_registry_credentials: Pull credential lookup; defaults to the
                sources configured in settings
            clock: Time source for shutdown waits
            sleep: Sleep function for shutdown waits
        """
        self.daemon = daemon
        self.settings = settings or Settings()
        if get_registry_credentials is None:
            get_registry_credentials = credentials_resolver(self.settings)

        self.staleness = StalenessDetector(
            daemon,
            pull_images=self.settings.pull_images,
            get_registry_credentials=get_registry_credentials,
        )
        self.shutdown = ShutdownSequencer(
            daemon,
            default_stop_signal=self.settings.stop_signal,
            poll_interval=self.settings.poll_interval,
            clock=clock,
            sleep=sleep,
        )
        self.recreation = RecreationEngine(daemon)
        self.commands = CommandExecutor(daemon)

    @classmethod
    def from_env(cls, settings: Optional[Settings] = None) -> 'ContainerClient':
        """Connect to the daemon named by DOCKER_HOST and friends."""
        settings = settings or Settings.from_env()
        return cls(DockerDaemon.from_env(version=settings.docker_api_version), settings)

    def list_containers(self, container_filter: Filter = no_filter) -> List[Container]:
        """Snapshot every running container and keep the ones the filter accepts."""
        logger.debug("Retrieving running containers")

        containers = []
        for summary in self.daemon.list_containers():
            container = self.get_container(summary['Id'])
            if container_filter(container):
                containers.append(container)
        return containers

    def get_container(self, container_id: str) -> Container:
        """
        Snapshot a container together with the image it was started from.

        The image is looked up by the id recorded on the container, not by its
        tag, so the snapshot describes the image actually running.

        Raises:
            NotFoundError: Container (or its image) no longer exists
        """
        container_info = self.daemon.inspect_container(container_id)
        image_info = self.daemon.inspect_image(container_info['Image'])
        return Container(container_info, image_info)

    def is_container_stale(self, container: Container) -> bool:
        return self.staleness.is_stale(container)

    def stop_container(self, container: Container, timeout: Optional[float] = None) -> None:
        """Stop and remove the container; timeout defaults to the configured stop timeout."""
        if timeout is None:
            timeout = self.settings.stop_timeout
        self.shutdown.stop(container, timeout)

    def start_container(self, container: Container) -> str:
        """Recreate the container from its snapshot and start it; returns the new id."""
        return self.recreation.recreate(container)

    def rename_container(self, container: Container, new_name: str) -> None:
        logger.debug(f"Renaming container {container.name} ({container.short_id}) to {new_name}")
        self.daemon.rename_container(container.id, new_name)

    def remove_image(self, container: Container) -> None:
        """Force-remove the image the container snapshot was running."""
        logger.info(f"Removing image {short_image_id(container.image_id)}")
        self.daemon.remove_image(container.image_id, force=True)

    def execute_command(self, container_id: str, command: str) -> ExecResult:
        return self.commands.execute(container_id, command)
