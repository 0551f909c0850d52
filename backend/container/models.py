"""
Container snapshot model.

A Container wraps one `docker inspect` result for the container and one for
the image it was started from, taken together. It is a point-in-time value:
nothing refreshes it, and every accessor hands out copies so callers cannot
mutate the captured state. Fetch a new snapshot to observe fresh daemon state.

Besides plain accessors the model derives the configuration needed to
recreate the container (runtime_config / host_config).
"""

import copy
from typing import Any, Dict, List, Optional

from utils.container_id import short_container_id
from utils.image_id import with_default_tag

# Image IDs are compared verbatim ("sha256:..."); equality means no update
ImageID = str

LABEL_PREFIX = 'dockshift'
STOP_SIGNAL_LABEL = f'{LABEL_PREFIX}.stop-signal'
ENABLE_LABEL = f'{LABEL_PREFIX}.enable'
PRE_UPDATE_LABEL = f'{LABEL_PREFIX}.lifecycle.pre-update'
POST_UPDATE_LABEL = f'{LABEL_PREFIX}.lifecycle.post-update'


def _subtract_list(values: Optional[List[Any]], defaults: Optional[List[Any]]) -> List[Any]:
    defaults = defaults or []
    return [v for v in (values or []) if v not in defaults]


def _subtract_map(values: Optional[Dict[str, Any]], defaults: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Drop entries whose key and value both match the defaults."""
    defaults = defaults or {}
    return {
        k: v for k, v in (values or {}).items()
        if k not in defaults or defaults[k] != v
    }


class Container:
    """Point-in-time snapshot of a container and the image it runs."""

    def __init__(self, container_info: Dict[str, Any], image_info: Optional[Dict[str, Any]] = None):
        self._container_info = copy.deepcopy(container_info)
        self._image_info = copy.deepcopy(image_info) if image_info is not None else None

    def __repr__(self) -> str:
        return f"<Container {self.name} ({self.short_id})>"

    @property
    def id(self) -> str:
        return self._container_info.get('Id', '')

    @property
    def short_id(self) -> str:
        return short_container_id(self.id)

    @property
    def name(self) -> str:
        return (self._container_info.get('Name') or '').lstrip('/')

    @property
    def running(self) -> bool:
        state = self._container_info.get('State') or {}
        return bool(state.get('Running', False))

    @property
    def image_id(self) -> ImageID:
        """ID of the image this container is running, as captured at inspection."""
        if self._image_info and self._image_info.get('Id'):
            return self._image_info['Id']
        return self._container_info.get('Image', '')

    @property
    def image_name(self) -> str:
        """
        Image reference the container was created from.

        References without tag or digest resolve to ':latest'.
        """
        config = self._container_info.get('Config') or {}
        return with_default_tag(config.get('Image') or '')

    @property
    def image_info(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._image_info)

    @property
    def image_digests(self) -> List[str]:
        return list((self._image_info or {}).get('RepoDigests') or [])

    @property
    def labels(self) -> Dict[str, str]:
        config = self._container_info.get('Config') or {}
        return dict(config.get('Labels') or {})

    @property
    def stop_signal(self) -> str:
        """
        Signal used to stop this container.

        The dockshift.stop-signal label wins over the container's StopSignal.
        Empty when neither is set; callers apply the configured default.
        """
        label_signal = self.labels.get(STOP_SIGNAL_LABEL)
        if label_signal:
            return label_signal
        config = self._container_info.get('Config') or {}
        return config.get('StopSignal') or ''

    @property
    def network_mode(self) -> str:
        host_config = self._container_info.get('HostConfig') or {}
        return host_config.get('NetworkMode') or ''

    @property
    def is_host_network(self) -> bool:
        return self.network_mode == 'host'

    @property
    def is_network_disabled(self) -> bool:
        return self.network_mode == 'none'

    @property
    def auto_remove(self) -> bool:
        host_config = self._container_info.get('HostConfig') or {}
        return bool(host_config.get('AutoRemove', False))

    @property
    def network_endpoints(self) -> Dict[str, Dict[str, Any]]:
        """Network name -> endpoint settings, as attached at inspection time."""
        settings = self._container_info.get('NetworkSettings') or {}
        return copy.deepcopy(settings.get('Networks') or {})

    @property
    def enabled(self) -> Optional[bool]:
        """Value of the dockshift.enable label; None when the label is absent."""
        raw = self.labels.get(ENABLE_LABEL)
        if raw is None:
            return None
        return raw.strip().lower() == 'true'

    @property
    def pre_update_command(self) -> str:
        return self.labels.get(PRE_UPDATE_LABEL, '')

    @property
    def post_update_command(self) -> str:
        return self.labels.get(POST_UPDATE_LABEL, '')

    def runtime_config(self) -> Dict[str, Any]:
        """
        Container Config to recreate this container from.

        Settings that merely repeat the old image's defaults are removed so the
        new image's defaults apply. Ports published in HostConfig are always
        exposed. Image is set to the image reference, not the old image id.
        """
        config = copy.deepcopy(self._container_info.get('Config') or {})
        image_config = (self._image_info or {}).get('Config') or {}

        if config.get('WorkingDir') == image_config.get('WorkingDir'):
            config['WorkingDir'] = ''
        if config.get('User') == image_config.get('User'):
            config['User'] = ''

        # Hostname defaults to the old short id; the new container gets its own
        if self.network_mode.startswith('container:') or config.get('Hostname') == self.short_id:
            config['Hostname'] = ''

        if (config.get('Entrypoint') or None) == (image_config.get('Entrypoint') or None):
            config['Entrypoint'] = None
            if (config.get('Cmd') or None) == (image_config.get('Cmd') or None):
                config['Cmd'] = None

        if config.get('Healthcheck') == image_config.get('Healthcheck'):
            config['Healthcheck'] = None

        config['Env'] = _subtract_list(config.get('Env'), image_config.get('Env'))
        config['Labels'] = _subtract_map(config.get('Labels'), image_config.get('Labels'))
        config['Volumes'] = {
            k: v for k, v in (config.get('Volumes') or {}).items()
            if k not in (image_config.get('Volumes') or {})
        }

        exposed = {
            k: v for k, v in (config.get('ExposedPorts') or {}).items()
            if k not in (image_config.get('ExposedPorts') or {})
        }
        host_config = self._container_info.get('HostConfig') or {}
        for port in (host_config.get('PortBindings') or {}):
            exposed[port] = {}
        config['ExposedPorts'] = exposed

        config['Image'] = self.image_name
        return config

    def host_config(self) -> Dict[str, Any]:
        """
        HostConfig to recreate this container with.

        Legacy links are rewritten from inspect format ("/db:/web/db") to the
        create format ("db:db").
        """
        host_config = copy.deepcopy(self._container_info.get('HostConfig') or {})

        links = []
        for link in host_config.get('Links') or []:
            name, _, alias = link.partition(':')
            links.append(f"{name.lstrip('/')}:{alias.rsplit('/', 1)[-1]}")
        host_config['Links'] = links or None

        return host_config
