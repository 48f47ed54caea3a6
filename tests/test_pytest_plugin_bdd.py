"""Behavioural test of the obj_mox pytest plug-in, expressed with pytest-bdd."""

from __future__ import annotations

import textwrap
import typing as t
from pathlib import Path

from pytest_bdd import given, scenario, then, when

if t.TYPE_CHECKING:  # pragma: no cover - used for type checking only
    from _pytest.pytester import Pytester, RunResult

FEATURES_DIR = Path(__file__).resolve().parent.parent / "features"
FEATURE = str(FEATURES_DIR / "pytest_plugin.feature")


@scenario(FEATURE, "obj_mox fixture basic usage")
def test_obj_mox_plugin() -> None:
    """Bind scenario steps for the pytest plugin."""
    pass


@scenario(FEATURE, "unmet expectations fail at teardown")
def test_obj_mox_plugin_teardown_failure() -> None:
    """Bind the teardown verification scenario."""
    pass


MODULE_HEADER = textwrap.dedent(
    """
    import typing as t

    pytest_plugins = ("obj_mox.pytest_plugin",)


    class Greeter(t.Protocol):
        def greet(self, name: str) -> str: ...
    """
)

PASSING_TEST = textwrap.dedent(
    """
    def test_example(obj_mox):
        greeter = obj_mox.create(Greeter)
        greeter.expect(lambda m: m.greet("bob")).returns("hi bob").verifiable()
        assert greeter.object.greet("bob") == "hi bob"
    """
)

UNMET_TEST = textwrap.dedent(
    """
    def test_example(obj_mox):
        greeter = obj_mox.create(Greeter)
        greeter.expect(lambda m: m.greet("bob")).returns("hi bob").verifiable()
    """
)


@given("a temporary test file using the obj_mox fixture", target_fixture="test_file")
def create_test_file(pytester: Pytester) -> Path:
    """Write the example test file."""
    return pytester.makepyfile(MODULE_HEADER + PASSING_TEST)


@given(
    "a temporary test file with an unmet obj_mox expectation",
    target_fixture="test_file",
)
def create_failing_test_file(pytester: Pytester) -> Path:
    """Write a test file whose expectation is never exercised."""
    return pytester.makepyfile(MODULE_HEADER + UNMET_TEST)


@when("I run pytest on the file", target_fixture="result")
def run_pytest(pytester: Pytester, test_file: Path) -> RunResult:
    """Run the inner pytest instance."""
    return pytester.runpytest(str(test_file))


@then("the run should pass")
def assert_success(result: RunResult) -> None:
    """Assert that the test passed."""
    result.assert_outcomes(passed=1)


@then("the run should fail")
def assert_failure(result: RunResult) -> None:
    """Assert that teardown verification reported an error."""
    result.assert_outcomes(passed=1, errors=1)
    result.stdout.fnmatch_lines(["*Greeter.greet('bob')*"])
