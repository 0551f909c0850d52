"""
Shared pytest fixtures for dockshift tests.

Fixtures provided:
- fake_daemon: In-memory DaemonClient test double
- fake_clock: Manually advanced clock/sleep pair for the polling waits
- make_container_info / make_image_info: Factories for inspect payloads
- settings: Settings with fast polling and pulling enabled
- client: ContainerClient wired to fake_daemon and fake_clock

FakeDaemon keeps containers and images as Docker-API-shaped dicts and records
every call in `calls`, so tests can assert on exact call order.
"""

import copy
import itertools
from typing import Any, Dict, List, Optional

import pytest

from config.settings import Settings
from container.client import ContainerClient
from container.errors import NotFoundError, TransportError


def build_image_info(
    image_id: str,
    ref: str = "nginx:latest",
    config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Image inspect payload."""
    return {
        'Id': image_id,
        'RepoTags': [ref],
        'RepoDigests': [f"{ref.split(':')[0]}@{image_id}"],
        'Config': config if config is not None else {
            'Env': ['PATH=/usr/local/bin:/usr/bin'],
            'Cmd': ['nginx', '-g', 'daemon off;'],
            'Entrypoint': None,
            'WorkingDir': '',
            'User': '',
            'Labels': {'maintainer': 'NGINX'},
            'ExposedPorts': {'80/tcp': {}},
            'Volumes': None,
        },
    }


def build_container_info(
    container_id: str = "c1" + "0" * 62,
    name: str = "web",
    image_ref: str = "nginx:latest",
    image_id: str = "sha256:aaa",
    networks: Optional[Dict[str, Dict[str, Any]]] = None,
    network_mode: str = "frontend",
    labels: Optional[Dict[str, str]] = None,
    env: Optional[List[str]] = None,
    running: bool = True,
    auto_remove: bool = False,
    stop_signal: Optional[str] = None,
) -> Dict[str, Any]:
    """Container inspect payload."""
    if networks is None:
        networks = {'frontend': {'Aliases': ['web', container_id[:12]], 'IPAddress': '172.18.0.2'}}
    return {
        'Id': container_id,
        'Name': f"/{name}",
        'Image': image_id,
        'State': {'Running': running, 'Status': 'running' if running else 'exited'},
        'Config': {
            'Hostname': container_id[:12],
            'Image': image_ref,
            'Env': env if env is not None else ['PATH=/usr/local/bin:/usr/bin', 'APP_MODE=prod'],
            'Cmd': ['nginx', '-g', 'daemon off;'],
            'Entrypoint': None,
            'WorkingDir': '',
            'User': '',
            'Labels': {'maintainer': 'NGINX', **(labels or {})},
            'ExposedPorts': {'80/tcp': {}},
            'StopSignal': stop_signal,
        },
        'HostConfig': {
            'NetworkMode': network_mode,
            'AutoRemove': auto_remove,
            'RestartPolicy': {'Name': 'unless-stopped', 'MaximumRetryCount': 0},
            'Binds': ['/srv/web:/usr/share/nginx/html:ro'],
            'PortBindings': {'80/tcp': [{'HostIp': '', 'HostPort': '8080'}]},
        },
        'NetworkSettings': {'Networks': copy.deepcopy(networks)},
    }


class FakeDaemon:
    """
    In-memory daemon.

    Behaviour switches:
    - exit_on_kill: a kill stops the container (False simulates a hung process)
    - remove_on_remove: a remove deletes the container (False simulates a
      removal that never takes effect)
    - pull_updates: image ref -> image info installed once a pull stream is drained
    - pull_errors: image ref -> error message reported as the last pull event
    - exec_results: command -> (exit code, output bytes)
    """

    def __init__(self):
        self.containers: Dict[str, Dict[str, Any]] = {}
        self.images: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.exit_on_kill = True
        self.remove_on_remove = True
        self.pull_updates: Dict[str, Dict[str, Any]] = {}
        self.pull_errors: Dict[str, str] = {}
        self.pulls_drained: List[str] = []
        self.exec_results: Dict[str, tuple] = {}
        self.execs: Dict[str, Dict[str, Any]] = {}
        self._ids = itertools.count(1)

    # Test setup

    def add_image(self, image_info: Dict[str, Any], *refs: str) -> None:
        self.images[image_info['Id']] = copy.deepcopy(image_info)
        for ref in refs:
            self.images[ref] = copy.deepcopy(image_info)

    def add_container(self, container_info: Dict[str, Any]) -> None:
        self.containers[container_info['Id']] = copy.deepcopy(container_info)

    def calls_named(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def _get(self, container_id: str) -> Dict[str, Any]:
        if container_id not in self.containers:
            raise NotFoundError(f"No such container: {container_id}")
        return self.containers[container_id]

    # DaemonClient

    def list_containers(self):
        self.calls.append(('list_containers',))
        return [{'Id': cid} for cid, info in self.containers.items() if info['State']['Running']]

    def inspect_container(self, container_id):
        self.calls.append(('inspect_container', container_id))
        return copy.deepcopy(self._get(container_id))

    def inspect_image(self, image_ref):
        self.calls.append(('inspect_image', image_ref))
        if image_ref not in self.images:
            raise NotFoundError(f"No such image: {image_ref}")
        return copy.deepcopy(self.images[image_ref])

    def kill_container(self, container_id, signal):
        self.calls.append(('kill_container', container_id, signal))
        info = self._get(container_id)
        if not info['State']['Running']:
            raise TransportError(f"Container {container_id} is not running", status_code=409)
        if self.exit_on_kill:
            info['State']['Running'] = False

    def remove_container(self, container_id, force=True, remove_volumes=False):
        self.calls.append(('remove_container', container_id, force, remove_volumes))
        self._get(container_id)
        if self.remove_on_remove:
            del self.containers[container_id]

    def create_container(self, config, host_config, networking_config, name):
        self.calls.append(('create_container', config, host_config, networking_config, name))
        if any(info['Name'] == f"/{name}" for info in self.containers.values()):
            raise TransportError(f"Conflict. The container name /{name} is already in use", status_code=409)
        image = self.images.get(config['Image'])
        if image is None:
            raise NotFoundError(f"No such image: {config['Image']}")

        new_id = f"{next(self._ids):04d}".ljust(64, 'f')
        endpoints = {}
        if networking_config:
            endpoints = copy.deepcopy(networking_config.get('EndpointsConfig') or {})
        self.containers[new_id] = {
            'Id': new_id,
            'Name': f"/{name}",
            'Image': image['Id'],
            'State': {'Running': False, 'Status': 'created'},
            'Config': copy.deepcopy(config),
            'HostConfig': copy.deepcopy(host_config),
            'NetworkSettings': {'Networks': endpoints},
        }
        return new_id

    def start_container(self, container_id):
        self.calls.append(('start_container', container_id))
        self._get(container_id)['State']['Running'] = True

    def rename_container(self, container_id, new_name):
        self.calls.append(('rename_container', container_id, new_name))
        self._get(container_id)['Name'] = f"/{new_name}"

    def disconnect_network(self, network, container_id, force=True):
        self.calls.append(('disconnect_network', network, container_id, force))
        networks = self._get(container_id)['NetworkSettings']['Networks']
        if network not in networks:
            raise TransportError(f"Container {container_id} is not connected to network {network}")
        del networks[network]

    def connect_network(self, network, container_id, endpoint):
        self.calls.append(('connect_network', network, container_id, copy.deepcopy(endpoint)))
        networks = self._get(container_id)['NetworkSettings']['Networks']
        if network in networks:
            raise TransportError(f"Container {container_id} is already connected to network {network}")
        networks[network] = copy.deepcopy(endpoint)

    def pull_image(self, image_ref, auth_config=None):
        self.calls.append(('pull_image', image_ref, auth_config))
        return self._pull_stream(image_ref)

    def _pull_stream(self, image_ref):
        yield {'status': f"Pulling from {image_ref}"}
        yield {'status': 'Download complete'}
        if image_ref in self.pull_errors:
            yield {'error': self.pull_errors[image_ref], 'errorDetail': {'message': self.pull_errors[image_ref]}}
            self.pulls_drained.append(image_ref)
            return
        # Only a fully consumed stream completes the pull
        if image_ref in self.pull_updates:
            self.images[image_ref] = copy.deepcopy(self.pull_updates[image_ref])
        self.pulls_drained.append(image_ref)

    def remove_image(self, image_id, force=True):
        self.calls.append(('remove_image', image_id, force))
        if image_id not in self.images:
            raise NotFoundError(f"No such image: {image_id}")
        self.images = {ref: info for ref, info in self.images.items() if info['Id'] != image_id}

    def exec_create(self, container_id, cmd, tty=True):
        self.calls.append(('exec_create', container_id, list(cmd), tty))
        self._get(container_id)
        exec_id = f"exec{next(self._ids)}"
        exit_code, output = self.exec_results.get(cmd[-1], (0, b""))
        self.execs[exec_id] = {'ExitCode': None, 'result': (exit_code, output)}
        return exec_id

    def exec_start(self, exec_id, tty=True):
        self.calls.append(('exec_start', exec_id, tty))
        exit_code, output = self.execs[exec_id]['result']
        self.execs[exec_id]['ExitCode'] = exit_code
        return iter([output] if output else [])

    def exec_inspect(self, exec_id):
        self.calls.append(('exec_inspect', exec_id))
        return {'ExitCode': self.execs[exec_id]['ExitCode'], 'Running': False}


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_daemon():
    return FakeDaemon()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_container_info():
    return build_container_info


@pytest.fixture
def make_image_info():
    return build_image_info


@pytest.fixture
def settings():
    return Settings(pull_images=True, stop_timeout=10, poll_interval=1)


@pytest.fixture
def client(fake_daemon, fake_clock, settings):
    """ContainerClient over the fake daemon; pulls are anonymous."""
    return ContainerClient(
        fake_daemon,
        settings,
        get_registry_credentials=lambda image_ref: None,
        clock=fake_clock,
        sleep=fake_clock.sleep,
    )


@pytest.fixture
def web_container(fake_daemon, client):
    """
    'web' on networks frontend and backend, running nginx:latest (sha256:aaa).

    Returns the Container snapshot fetched through the client.
    """
    image = build_image_info("sha256:aaa")
    fake_daemon.add_image(image, "nginx:latest")
    info = build_container_info(
        networks={
            'frontend': {'Aliases': ['web', 'c10000000000'], 'IPAddress': '172.18.0.2'},
            'backend': {
                'Aliases': ['api'],
                'IPAMConfig': {'IPv4Address': '10.10.0.5'},
                'IPAddress': '10.10.0.5',
            },
        },
    )
    fake_daemon.add_container(info)
    snapshot = client.get_container(info['Id'])
    fake_daemon.calls.clear()
    return snapshot
