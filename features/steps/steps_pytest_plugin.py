"""Steps for testing the pytest plugin."""

from __future__ import annotations

import shutil
import subprocess
import sys
import tempfile
import textwrap
import typing as t
from pathlib import Path

from behave import given, then, when  # type: ignore[attr-defined]

MODULE_HEADER = textwrap.dedent(
    """
    import typing as t

    pytest_plugins = ("obj_mox.pytest_plugin",)


    class Greeter(t.Protocol):
        def greet(self, name: str) -> str: ...
    """
)


class BehaveContext(t.Protocol):
    """Behave step context for plugin tests."""

    test_file: Path
    tmpdir: Path
    result: subprocess.CompletedProcess[str]


def _write_test_file(context: BehaveContext, body: str) -> None:
    tmpdir = Path(tempfile.mkdtemp())
    context.tmpdir = tmpdir
    context.test_file = tmpdir / "test_example.py"
    context.test_file.write_text(MODULE_HEADER + textwrap.dedent(body))


@given("a temporary test file using the obj_mox fixture")
def step_create_test_file(context: BehaveContext) -> None:
    """Write a pytest file that exercises the fixture."""
    _write_test_file(
        context,
        """
        def test_example(obj_mox):
            greeter = obj_mox.create(Greeter)
            greeter.expect(lambda m: m.greet("bob")).returns("hi").verifiable()
            assert greeter.object.greet("bob") == "hi"
        """,
    )


@given("a temporary test file with an unmet obj_mox expectation")
def step_create_unmet_test_file(context: BehaveContext) -> None:
    """Write a pytest file whose verifiable expectation is never used."""
    _write_test_file(
        context,
        """
        def test_example(obj_mox):
            greeter = obj_mox.create(Greeter)
            greeter.expect(lambda m: m.greet("bob")).returns("hi").verifiable()
        """,
    )


@when("I run pytest on the file")
def step_run_pytest(context: BehaveContext) -> None:
    """Execute pytest on the generated file."""
    result = subprocess.run(  # noqa: S603
        [
            sys.executable,
            "-m",
            "pytest",
            "-p",
            "no:cacheprovider",
            str(context.test_file),
        ],
        capture_output=True,
        text=True,
        cwd=context.tmpdir,
    )
    context.result = result
    shutil.rmtree(context.tmpdir)


@then("the run should pass")
def step_check_pass(context: BehaveContext) -> None:
    """Assert that pytest exited successfully."""
    assert context.result.returncode == 0, context.result.stdout  # noqa: S101


@then("the run should fail")
def step_check_fail(context: BehaveContext) -> None:
    """Assert that teardown verification failed the run."""
    assert context.result.returncode != 0  # noqa: S101
    assert "Greeter.greet('bob')" in context.result.stdout  # noqa: S101
