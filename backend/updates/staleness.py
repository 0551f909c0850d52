"""
Staleness detection.

Decides whether a newer image is available for a container by comparing the
image id captured in its snapshot with the id the image reference resolves to
now, optionally pulling first.
"""

import logging
from typing import Optional, Tuple

from container.daemon import DaemonClient
from container.errors import TransportError
from container.models import Container, ImageID
from utils.image_id import short_image_id
from utils.registry_credentials import CredentialsResolver

logger = logging.getLogger(__name__)


class StalenessDetector:
    """
    Checks containers for newer images.

    With pull_images disabled the check relies on whatever image is already
    present locally (useful when images are built on the host).
    """

    def __init__(
        self,
        daemon: DaemonClient,
        pull_images: bool = True,
        get_registry_credentials: Optional[CredentialsResolver] = None,
    ):
        """
        Args:
            daemon: Daemon capability set
            pull_images: Pull the image reference before comparing
            get_registry_credentials: Resolves pull credentials for an image
                reference; None means always pull anonymously
        """
        self.daemon = daemon
        self.pull_images = pull_images
        self.get_registry_credentials = get_registry_credentials

    def is_stale(self, container: Container) -> bool:
        """
        Return True when the image reference now resolves to a different image.

        Raises:
            RegistryAuthError: Credentials could not be resolved (never read as fresh)
            NotFoundError, TransportError: Pull or image inspection failed
        """
        _, stale = self.latest_image_id(container)
        return stale

    def latest_image_id(self, container: Container) -> Tuple[ImageID, bool]:
        """
        Resolve the current image id for the container's image reference.

        Returns:
            (latest image id, stale flag)
        """
        image_name = container.runtime_config()['Image']

        if self.pull_images:
            self._pull(container, image_name)

        new_image_info = self.daemon.inspect_image(image_name)
        new_image_id: ImageID = new_image_info.get('Id', '')

        if new_image_id != container.image_id:
            logger.info(
                f"Found new {image_name} image ({short_image_id(new_image_id)}) "
                f"for {container.name} ({container.short_id})"
            )
            return new_image_id, True

        logger.debug(f"No new images found for {container.name}")
        return new_image_id, False

    def _pull(self, container: Container, image_name: str) -> None:
        logger.debug(f"Pulling {image_name} for {container.name}")

        auth_config = None
        if self.get_registry_credentials:
            auth_config = self.get_registry_credentials(image_name)
            if not auth_config:
                logger.debug(f"No authentication credentials found for {image_name}")
                auth_config = None

        stream = self.daemon.pull_image(image_name, auth_config=auth_config)

        # The daemon only finishes the pull once the whole progress stream is read
        errors = []
        for event in stream:
            if isinstance(event, dict) and event.get('error'):
                logger.debug(f"Pull of {image_name} reported: {event['error']}")
                errors.append(event['error'])

        # A failed pull leaves the old local image in place; never compare against it
        if errors:
            raise TransportError(
                f"Pull of {image_name} failed: {errors[-1]}",
                container_name=container.name,
                container_id=container.id,
            )
