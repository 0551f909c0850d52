"""
Container Module

Snapshots of containers, selection filters, the daemon capability set and
the error taxonomy. ContainerClient lives in container.client.
"""

from container.errors import (
    CommandFailedError,
    ContainerError,
    ContainerRemovalError,
    NotFoundError,
    RegistryAuthError,
    TransportError,
)
from container.filters import Filter, build_filter, no_filter
from container.models import Container, ImageID

__all__ = [
    'CommandFailedError',
    'Container',
    'ContainerError',
    'ContainerRemovalError',
    'Filter',
    'ImageID',
    'NotFoundError',
    'RegistryAuthError',
    'TransportError',
    'build_filter',
    'no_filter',
]
