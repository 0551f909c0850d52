"""
Docker daemon capability set.

DaemonClient names every daemon operation the update flow needs. Everything
above this module talks to the daemon only through it, so tests can swap in
a fake without a running Docker.

DockerDaemon implements DaemonClient on the docker SDK's low-level
APIClient. Payloads stay in Docker API shape (PascalCase dicts straight from
inspect) and are passed through to create_container, so no HostConfig field
is lost in translation. SDK and requests exceptions are translated here into
NotFoundError / TransportError and nowhere else.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Protocol, Tuple

import docker
import requests

from container.errors import NotFoundError, TransportError
from utils.network_helpers import endpoint_connect_kwargs

logger = logging.getLogger(__name__)


class DaemonClient(Protocol):
    """Operations dockshift issues against a container daemon."""

    def list_containers(self) -> List[Dict[str, Any]]:
        """Running containers (summary dicts carrying at least 'Id')."""
        ...

    def inspect_container(self, container_id: str) -> Dict[str, Any]:
        ...

    def inspect_image(self, image_ref: str) -> Dict[str, Any]:
        ...

    def kill_container(self, container_id: str, signal: str) -> None:
        ...

    def remove_container(self, container_id: str, force: bool = True, remove_volumes: bool = False) -> None:
        ...

    def create_container(
        self,
        config: Dict[str, Any],
        host_config: Dict[str, Any],
        networking_config: Optional[Dict[str, Any]],
        name: str,
    ) -> str:
        """Create a container and return its id."""
        ...

    def start_container(self, container_id: str) -> None:
        ...

    def rename_container(self, container_id: str, new_name: str) -> None:
        ...

    def disconnect_network(self, network: str, container_id: str, force: bool = True) -> None:
        ...

    def connect_network(self, network: str, container_id: str, endpoint: Dict[str, Any]) -> None:
        ...

    def pull_image(self, image_ref: str, auth_config: Optional[Dict[str, str]] = None) -> Iterable[Any]:
        """Start a pull; the returned progress stream must be consumed to completion."""
        ...

    def remove_image(self, image_id: str, force: bool = True) -> None:
        ...

    def exec_create(self, container_id: str, cmd: List[str], tty: bool = True) -> str:
        """Create an exec session with stdout/stderr attached; return its id."""
        ...

    def exec_start(self, exec_id: str, tty: bool = True) -> Iterable[bytes]:
        """Start an exec session and return its attached output stream."""
        ...

    def exec_inspect(self, exec_id: str) -> Dict[str, Any]:
        ...


@contextmanager
def translate_errors(action: str, target: str):
    """Re-raise SDK/transport exceptions from a daemon call as dockshift errors."""
    try:
        yield
    except docker.errors.NotFound as e:
        raise NotFoundError(f"{action} {target}: not found ({e.explanation or e})") from e
    except docker.errors.APIError as e:
        raise TransportError(f"{action} {target} failed: {e}", status_code=e.status_code) from e
    except (docker.errors.DockerException, requests.exceptions.RequestException) as e:
        raise TransportError(f"{action} {target} failed: {e}") from e


def _exposed_ports(exposed: Optional[Dict[str, Any]]) -> Optional[List[Tuple[str, ...]]]:
    """
    Turn inspect-format ExposedPorts keys ("53/udp") into SDK port tuples.

    The SDK appends "/tcp" to plain string ports, so "80/tcp" has to be
    passed as ("80", "tcp").
    """
    if not exposed:
        return None
    return [tuple(port.split('/', 1)) for port in exposed]


def _create_kwargs(config: Dict[str, Any]) -> Dict[str, Any]:
    """Map a Docker API Config dict onto APIClient.create_container keyword arguments."""
    return {
        'image': config.get('Image'),
        'command': config.get('Cmd'),
        'hostname': config.get('Hostname') or None,
        'domainname': config.get('Domainname') or None,
        'user': config.get('User') or None,
        'working_dir': config.get('WorkingDir') or None,
        'entrypoint': config.get('Entrypoint'),
        'environment': config.get('Env') or None,
        'labels': config.get('Labels') or None,
        'ports': _exposed_ports(config.get('ExposedPorts')),
        'volumes': list(config.get('Volumes') or {}) or None,
        'healthcheck': config.get('Healthcheck') or None,
        'stop_signal': config.get('StopSignal') or None,
        'stop_timeout': config.get('StopTimeout'),
        'tty': config.get('Tty', False),
        'stdin_open': config.get('OpenStdin', False),
        # Keep Env exactly as captured; no proxy variables from the client config
        'use_config_proxy': False,
    }


class DockerDaemon:
    """
    DaemonClient backed by docker.APIClient.

    The APIClient is safe to share between threads; this class holds no other state.
    """

    def __init__(self, api: docker.APIClient):
        self.api = api

    @classmethod
    def from_env(cls, version: Optional[str] = None) -> 'DockerDaemon':
        """
        Connect using DOCKER_HOST, DOCKER_TLS_VERIFY and DOCKER_CERT_PATH.

        Args:
            version: Docker API version to pin; None negotiates with the daemon
        """
        with translate_errors("connect to", "docker daemon"):
            api = docker.APIClient(version=version, **docker.utils.kwargs_from_env())
        return cls(api)

    def list_containers(self) -> List[Dict[str, Any]]:
        with translate_errors("list", "containers"):
            return self.api.containers()

    def inspect_container(self, container_id: str) -> Dict[str, Any]:
        with translate_errors("inspect container", container_id):
            return self.api.inspect_container(container_id)

    def inspect_image(self, image_ref: str) -> Dict[str, Any]:
        with translate_errors("inspect image", image_ref):
            return self.api.inspect_image(image_ref)

    def kill_container(self, container_id: str, signal: str) -> None:
        with translate_errors("kill container", container_id):
            self.api.kill(container_id, signal=signal)

    def remove_container(self, container_id: str, force: bool = True, remove_volumes: bool = False) -> None:
        with translate_errors("remove container", container_id):
            self.api.remove_container(container_id, v=remove_volumes, force=force)

    def create_container(
        self,
        config: Dict[str, Any],
        host_config: Dict[str, Any],
        networking_config: Optional[Dict[str, Any]],
        name: str,
    ) -> str:
        with translate_errors("create container", name):
            response = self.api.create_container(
                name=name,
                host_config=host_config,
                networking_config=networking_config,
                **_create_kwargs(config),
            )
        for warning in response.get('Warnings') or []:
            logger.warning(f"Daemon warning creating {name}: {warning}")
        return response['Id']

    def start_container(self, container_id: str) -> None:
        with translate_errors("start container", container_id):
            self.api.start(container_id)

    def rename_container(self, container_id: str, new_name: str) -> None:
        with translate_errors("rename container", container_id):
            self.api.rename(container_id, new_name)

    def disconnect_network(self, network: str, container_id: str, force: bool = True) -> None:
        with translate_errors(f"disconnect {container_id} from network", network):
            self.api.disconnect_container_from_network(container_id, network, force=force)

    def connect_network(self, network: str, container_id: str, endpoint: Dict[str, Any]) -> None:
        with translate_errors(f"connect {container_id} to network", network):
            self.api.connect_container_to_network(container_id, network, **endpoint_connect_kwargs(endpoint))

    def pull_image(self, image_ref: str, auth_config: Optional[Dict[str, str]] = None) -> Iterator[Any]:
        with translate_errors("pull image", image_ref):
            stream = self.api.pull(image_ref, stream=True, decode=True, auth_config=auth_config)
        return self._guarded_stream(stream, "pull image", image_ref)

    def remove_image(self, image_id: str, force: bool = True) -> None:
        with translate_errors("remove image", image_id):
            self.api.remove_image(image_id, force=force)

    def exec_create(self, container_id: str, cmd: List[str], tty: bool = True) -> str:
        with translate_errors("create exec in", container_id):
            response = self.api.exec_create(container_id, cmd, stdout=True, stderr=True, tty=tty)
        return response['Id']

    def exec_start(self, exec_id: str, tty: bool = True) -> Iterator[bytes]:
        with translate_errors("start exec", exec_id):
            stream = self.api.exec_start(exec_id, detach=False, tty=tty, stream=True)
        return self._guarded_stream(stream, "read exec output", exec_id)

    def exec_inspect(self, exec_id: str) -> Dict[str, Any]:
        with translate_errors("inspect exec", exec_id):
            return self.api.exec_inspect(exec_id)

    @staticmethod
    def _guarded_stream(stream: Iterable[Any], action: str, target: str) -> Iterator[Any]:
        """Yield from an SDK stream, translating errors raised mid-read."""
        with translate_errors(action, target):
            yield from stream
