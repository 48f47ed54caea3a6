"""Global test configuration and shared fixtures."""

from __future__ import annotations

import typing as t

import pytest

from obj_mox import comparators

pytest_plugins = ("pytester", "obj_mox.pytest_plugin")


@pytest.fixture(autouse=True)
def reset_custom_matchers() -> t.Generator[None, None, None]:
    """Ensure custom matcher registrations do not leak between tests."""
    before = set(comparators.registered_matchers())
    yield
    for kind in set(comparators.registered_matchers()) - before:
        comparators.unregister_matcher(kind)
