"""Pytest plugin providing the ``obj_mox`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .controller import MockFactory, MockVerification
from .dispatcher import MockBehavior

logger = logging.getLogger(__name__)

_SETTINGS: dict[str, type[MockBehavior] | type[MockVerification]] = {
    "behavior": MockBehavior,
    "verification": MockVerification,
}


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("obj_mox")
    group.addoption(
        "--obj-mox-behavior",
        action="store",
        dest="obj_mox_behavior",
        default=None,
        choices=[mode.value for mode in MockBehavior],
        help=(
            "Behaviour of mocks created by the obj_mox fixture for calls "
            "without a matching expectation. Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--obj-mox-verification",
        action="store",
        dest="obj_mox_verification",
        default=None,
        choices=[mode.value for mode in MockVerification],
        help=(
            "Which expectations the obj_mox fixture verifies during teardown. "
            "Overrides the pytest.ini setting."
        ),
    )
    parser.addini(
        "obj_mox_behavior",
        "Default behaviour of mocks created by the obj_mox fixture.",
        default=MockBehavior.DEFAULT.value,
    )
    parser.addini(
        "obj_mox_verification",
        "Which expectations the obj_mox fixture verifies during teardown.",
        default=MockVerification.VERIFIABLE.value,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "obj_mox(behavior: str = 'normal', verification: str = 'verifiable'): "
            "override the obj_mox fixture settings for a single test."
        ),
    )


class _ObjMoxItem(t.Protocol):
    """pytest item carrying obj_mox teardown state."""

    _obj_mox_factory: MockFactory | None
    _obj_mox_verify_error: Exception | None


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Attach the report of each phase to the test item.

    Teardown uses the call-phase report to decide whether a verification
    failure should fail the test or only be reported alongside the original
    failure.
    """
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)
    if rep.when == "teardown":
        _apply_deferred_verify_failure(item, rep)


def _resolve_setting(request: pytest.FixtureRequest, key: str) -> str:
    """Return the setting for *key*: marker > fixture param > CLI > ini."""
    marker = request.node.get_closest_marker("obj_mox")
    if marker is not None and key in marker.kwargs:
        return str(marker.kwargs[key])

    param = getattr(request, "param", None)
    if param is not None:
        if not isinstance(param, dict):
            msg = (
                "obj_mox fixture param must be a dict with 'behavior' and/or "
                f"'verification' keys, got {type(param).__name__}"
            )
            raise TypeError(msg)
        unknown = sorted(set(param) - set(_SETTINGS))
        if unknown:
            msg = f"obj_mox fixture param has unknown keys: {unknown}"
            raise TypeError(msg)
        if key in param:
            return str(param[key])

    config = request.config
    cli_value = config.getoption(f"obj_mox_{key}", default=None)
    if cli_value is not None:
        return str(cli_value)
    return str(config.getini(f"obj_mox_{key}"))


def _parse_setting(request: pytest.FixtureRequest, key: str) -> t.Any:
    raw = _resolve_setting(request, key).strip().lower()
    enum_type = _SETTINGS[key]
    try:
        return enum_type(raw)
    except ValueError:
        choices = ", ".join(mode.value for mode in enum_type)
        msg = f"invalid obj_mox {key} {raw!r}; expected one of: {choices}"
        raise pytest.UsageError(msg) from None


def _apply_deferred_verify_failure(
    item: pytest.Item, report: pytest.TestReport
) -> None:
    """Attach a verification error to an already failing test's report."""
    err: Exception | None = getattr(item, "_obj_mox_verify_error", None)
    if err is None:
        return
    delattr(item, "_obj_mox_verify_error")
    report.sections.append(("obj_mox verification", f"{type(err).__name__}: {err}"))


@pytest.fixture
def obj_mox(request: pytest.FixtureRequest) -> t.Generator[MockFactory, None, None]:
    """Provide a :class:`MockFactory` whose mocks are verified at teardown."""
    behavior = _parse_setting(request, "behavior")
    verification = _parse_setting(request, "verification")
    factory = MockFactory(behavior, verification)
    typed_item = t.cast("_ObjMoxItem", request.node)
    typed_item._obj_mox_factory = factory
    try:
        yield factory
    finally:
        _teardown_obj_mox(request.node, factory)


def _teardown_obj_mox(item: pytest.Item, factory: MockFactory) -> None:
    """Verify *factory* and fail the test unless it already failed."""
    typed_item = t.cast("_ObjMoxItem", item)
    if getattr(typed_item, "_obj_mox_factory", None) is factory:
        delattr(typed_item, "_obj_mox_factory")
    try:
        factory.verify()
    except Exception as err:
        logger.exception("Error during obj_mox verification")
        if _call_stage_failed(item):
            typed_item._obj_mox_verify_error = err
            return
        pytest.fail(f"{type(err).__name__}: {err}")


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)
