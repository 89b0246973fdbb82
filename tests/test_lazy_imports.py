"""Tests for axium.__init__ — lazy public API."""

import pytest

import axium


@pytest.mark.parametrize("name", axium.__all__)
def test_all_names_resolve(name: str) -> None:
    """Every name in __all__ must resolve via __getattr__ without error."""
    assert getattr(axium, name) is not None


def test_unknown_name_raises_attribute_error() -> None:
    with pytest.raises(AttributeError, match="no attribute"):
        axium.__getattr__("ThisDoesNotExist")
