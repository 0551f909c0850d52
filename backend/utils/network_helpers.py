"""
Network helper utilities for dockshift.

The daemon only accepts a single network at container creation time, so
recreation creates the container on one network and then reconnects it to
every network it had before. These helpers pick the creation network, keep
only the user-configured part of inspected endpoint settings, and translate
endpoint settings into SDK connect parameters.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Endpoint fields set by the user; everything else (IPAddress, Gateway,
# MacAddress, NetworkID, EndpointID, ...) is assigned by the daemon
_USER_ENDPOINT_FIELDS = ('IPAMConfig', 'Aliases', 'Links', 'DriverOpts')


def select_creation_network(endpoints: Dict[str, Any]) -> Optional[str]:
    """
    Pick the one network to pass at creation time.

    Any entry works since every network is reconnected afterwards; sorting
    keeps the choice stable across runs.

    Returns:
        Network name, or None if the container had no networks
    """
    if not endpoints:
        return None
    return sorted(endpoints)[0]


def prune_endpoint(
    endpoint: Optional[Dict[str, Any]],
    exclude_aliases: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Keep only user-configured endpoint settings.

    Args:
        endpoint: EndpointSettings dict from NetworkSettings.Networks
        exclude_aliases: Aliases the daemon generated for the old container
            (its short id), which must not follow it to the new one

    Returns:
        New dict with IPAMConfig, Aliases, Links and DriverOpts when set
    """
    if not endpoint:
        return {}

    excluded = set(exclude_aliases)
    pruned: Dict[str, Any] = {}

    for field in _USER_ENDPOINT_FIELDS:
        if endpoint.get(field):
            pruned[field] = endpoint[field]

    if 'Aliases' in pruned:
        aliases = [a for a in pruned['Aliases'] if a not in excluded]
        if aliases:
            pruned['Aliases'] = aliases
        else:
            del pruned['Aliases']

    return pruned


def _split_links(links: Iterable[str]) -> List[Tuple[str, str]]:
    """Turn inspect-format links ("/other:/me/alias") into (name, alias) pairs."""
    pairs = []
    for link in links:
        name, _, alias = link.partition(":")
        pairs.append((name.lstrip("/"), alias.rsplit("/", 1)[-1] or name.lstrip("/")))
    return pairs


def endpoint_connect_kwargs(endpoint: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Translate endpoint settings into APIClient.connect_container_to_network kwargs.

    This handles:
    - Network aliases
    - Static IP addresses (IPv4/IPv6, link-local)
    - Links (legacy)
    - Driver options
    """
    if not endpoint:
        return {}

    kwargs: Dict[str, Any] = {}

    ipam = endpoint.get("IPAMConfig") or {}
    if ipam.get("IPv4Address"):
        kwargs["ipv4_address"] = ipam["IPv4Address"]
        logger.debug(f"  Static IPv4: {ipam['IPv4Address']}")
    if ipam.get("IPv6Address"):
        kwargs["ipv6_address"] = ipam["IPv6Address"]
        logger.debug(f"  Static IPv6: {ipam['IPv6Address']}")
    if ipam.get("LinkLocalIPs"):
        kwargs["link_local_ips"] = list(ipam["LinkLocalIPs"])

    if endpoint.get("Aliases"):
        kwargs["aliases"] = list(endpoint["Aliases"])
        logger.debug(f"  Aliases: {endpoint['Aliases']}")

    if endpoint.get("Links"):
        kwargs["links"] = _split_links(endpoint["Links"])

    if endpoint.get("DriverOpts"):
        kwargs["driver_opt"] = dict(endpoint["DriverOpts"])

    return kwargs


def creation_networking_config(
    network_name: Optional[str],
    endpoint: Optional[Dict[str, Any]],
) -> Optional[Dict[str, Any]]:
    """
    Build the single-network NetworkingConfig passed at creation.

    Returns:
        {"EndpointsConfig": {name: settings}}, or None without a network
    """
    if network_name is None:
        return None
    return {"EndpointsConfig": {network_name: dict(endpoint or {})}}
