"""
Error taxonomy for container operations.

All daemon failures surface as one of these types. The Docker adapter
(container/daemon.py) is the only place SDK exceptions are translated.
"""

from typing import Optional


class ContainerError(Exception):
    """Base class for dockshift container errors."""

    def __init__(
        self,
        message: str,
        container_name: Optional[str] = None,
        container_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.container_name = container_name
        self.container_id = container_id


class NotFoundError(ContainerError):
    """Container or image no longer exists on the daemon."""

    pass


class TransportError(ContainerError):
    """Any other failure talking to the daemon (connection, API error, bad response)."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code

    @property
    def is_conflict(self) -> bool:
        """Daemon refused the call because of the container's current state (HTTP 409)."""
        return self.status_code == 409


class ContainerRemovalError(ContainerError):
    """
    Removal was requested but the container is still present after the wait window.

    The daemon calls succeeded; the effect could not be observed.
    """

    pass


class RegistryAuthError(ContainerError):
    """Registry credentials could not be resolved for an image."""

    pass


class CommandFailedError(ContainerError):
    """A command inside a container exited nonzero (raised only on request)."""

    def __init__(self, message: str, exit_code: int, output: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.exit_code = exit_code
        self.output = output
