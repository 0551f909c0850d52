"""
Shutdown sequence: signal, wait, remove, confirm.

The container is killed with its stop signal rather than stopped with a
blocking call, so the wait is bounded by our own timeout. Removal is only
reported as done once the daemon no longer knows the container.
"""

import logging
import time
from typing import Callable

from config.settings import DEFAULT_STOP_SIGNAL
from container.daemon import DaemonClient
from container.errors import ContainerRemovalError, NotFoundError, TransportError
from container.models import Container
from utils.polling import poll_until

logger = logging.getLogger(__name__)


class ShutdownSequencer:
    """Stops and removes containers with bounded waits."""

    def __init__(
        self,
        daemon: DaemonClient,
        default_stop_signal: str = DEFAULT_STOP_SIGNAL,
        poll_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.daemon = daemon
        self.default_stop_signal = default_stop_signal
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    def stop(self, container: Container, timeout: float) -> None:
        """
        Stop and remove a container, confirming it is gone.

        1. Send the container's stop signal (or the default)
        2. Wait up to timeout for it to exit; proceed anyway on timeout
        3. Force-remove it, keeping volumes, unless the daemon auto-removes it
        4. Wait up to timeout for it to disappear

        Args:
            container: Snapshot of the container to stop
            timeout: Seconds allowed for each of the two waits

        Raises:
            ContainerRemovalError: Container still present after the second wait
            TransportError: Kill, remove or inspection failed
        """
        signal = container.stop_signal or self.default_stop_signal
        label = f"{container.name} ({container.short_id})"

        logger.info(f"Stopping {label} with {signal}")

        already_gone = False
        try:
            self.daemon.kill_container(container.id, signal)
        except NotFoundError:
            logger.debug(f"Container {label} no longer exists, nothing to stop")
            already_gone = True
        except TransportError as e:
            if not e.is_conflict:
                raise
            # Not running anymore; removal still applies
            logger.debug(f"Container {label} is not running: {e}")

        if not already_gone:
            if not self._wait_for_exit(container, timeout):
                logger.warning(f"Container {label} did not exit within {timeout}s, removing anyway")

            if container.auto_remove:
                logger.debug(f"AutoRemove container {label}, skipping remove call")
            else:
                logger.info(f"Removing container {label}")
                try:
                    self.daemon.remove_container(container.id, force=True, remove_volumes=False)
                except NotFoundError:
                    logger.debug(f"Container {label} was already removed")

        if not self._wait_for_removal(container, timeout):
            raise ContainerRemovalError(
                f"Container {label} could not be removed",
                container_name=container.name,
                container_id=container.id,
            )

        logger.debug(f"Container {label} removed")

    def _wait_for_exit(self, container: Container, timeout: float) -> bool:
        def _exited() -> bool:
            try:
                info = self.daemon.inspect_container(container.id)
            except NotFoundError:
                return True
            return not (info.get('State') or {}).get('Running', False)

        return poll_until(_exited, timeout, self.poll_interval, self._clock, self._sleep)

    def _wait_for_removal(self, container: Container, timeout: float) -> bool:
        def _gone() -> bool:
            try:
                self.daemon.inspect_container(container.id)
            except NotFoundError:
                return True
            return False

        return poll_until(_gone, timeout, self.poll_interval, self._clock, self._sleep)
