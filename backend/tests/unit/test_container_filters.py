"""
Unit tests for container selection filters.
"""

import pytest

from container.filters import (
    build_filter,
    filter_by_disable_label,
    filter_by_enable_label,
    filter_by_names,
    no_filter,
)
from container.models import Container


@pytest.fixture
def make_container(make_container_info):
    def _make(name, labels=None):
        return Container(make_container_info(name=name, labels=labels))
    return _make


@pytest.mark.unit
def test_no_filter_accepts_everything(make_container):
    assert no_filter(make_container("web")) is True


@pytest.mark.unit
def test_filter_by_names(make_container):
    f = filter_by_names(["web", "/db"])
    assert f(make_container("web")) is True
    assert f(make_container("db")) is True
    assert f(make_container("cache")) is False


@pytest.mark.unit
def test_filter_by_names_empty_accepts_all(make_container):
    assert filter_by_names([])(make_container("anything")) is True


@pytest.mark.unit
def test_enable_label_is_opt_in(make_container):
    f = filter_by_enable_label()
    assert f(make_container("a", {"dockshift.enable": "true"})) is True
    assert f(make_container("b", {"dockshift.enable": "false"})) is False
    assert f(make_container("c")) is False


@pytest.mark.unit
def test_disable_label_is_opt_out(make_container):
    f = filter_by_disable_label()
    assert f(make_container("a", {"dockshift.enable": "true"})) is True
    assert f(make_container("b", {"dockshift.enable": "false"})) is False
    assert f(make_container("c")) is True


@pytest.mark.unit
class TestBuildFilter:
    """Combination of name and label filters."""

    def test_default_only_excludes_opted_out(self, make_container):
        f = build_filter()
        assert f(make_container("web")) is True
        assert f(make_container("web", {"dockshift.enable": "false"})) is False

    def test_names_and_enable_label(self, make_container):
        f = build_filter(names=["web"], enable_label=True)
        assert f(make_container("web", {"dockshift.enable": "true"})) is True
        assert f(make_container("web")) is False
        assert f(make_container("db", {"dockshift.enable": "true"})) is False
