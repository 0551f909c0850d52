"""
Container filters.

A Filter is a pure predicate over Container snapshots. list_containers applies
it to every running container, so selection logic can be tested without a
daemon. Which containers to update is the caller's decision; these are just
common building blocks.
"""

from typing import Callable, Iterable, Optional

from container.models import Container

Filter = Callable[[Container], bool]


def no_filter(container: Container) -> bool:
    """Accept every container."""
    return True


def filter_by_names(names: Iterable[str], base: Filter = no_filter) -> Filter:
    """Accept containers whose name is in names (all containers if names is empty)."""
    wanted = {name.lstrip('/') for name in names}
    if not wanted:
        return base

    def _filter(container: Container) -> bool:
        return container.name in wanted and base(container)

    return _filter


def filter_by_enable_label(base: Filter = no_filter) -> Filter:
    """Accept only containers labelled dockshift.enable=true."""

    def _filter(container: Container) -> bool:
        return container.enabled is True and base(container)

    return _filter


def filter_by_disable_label(base: Filter = no_filter) -> Filter:
    """Reject containers labelled dockshift.enable=false."""

    def _filter(container: Container) -> bool:
        return container.enabled is not False and base(container)

    return _filter


def build_filter(names: Optional[Iterable[str]] = None, enable_label: bool = False) -> Filter:
    """
    Combine the standard filters.

    Args:
        names: Restrict to these container names
        enable_label: Opt-in mode; only labelled containers are accepted.
            Otherwise containers can still opt out with dockshift.enable=false

    Returns:
        Combined filter
    """
    result: Filter = no_filter
    result = filter_by_names(names or [], result)
    if enable_label:
        result = filter_by_enable_label(result)
    else:
        result = filter_by_disable_label(result)
    return result
