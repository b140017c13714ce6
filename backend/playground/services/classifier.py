"""Maps toolchain process outcomes to execution results.

Diagnostics are passed through untouched so line/column references in
compiler output stay usable.
"""

from typing import Sequence

from playground.core.enums import FailureKind
from playground.schemas.execution import ExecutionResult
from playground.services.runner import PipelineOutcome
from playground.services.templates import LanguageTemplate


def _diagnostic(stderr: str, stdout: str, code: int | None) -> str:
    if stderr.strip():
        return stderr
    if stdout.strip():
        return stdout
    if code is not None and code < 0:
        return f"Process terminated by signal {-code}"
    return f"Process exited with code {code}"


def classify(
    *,
    build_exit: int | None,
    run_exit: int | None,
    stdout: str,
    stderr: str,
    timed_out: bool,
    timeout_message: str,
    compile_markers: Sequence[str] = (),
) -> ExecutionResult:
    """Precedence: timeout, build failure, run failure, success.

    ``build_exit`` is None when the toolchain has no separate build step;
    ``stdout``/``stderr`` belong to the last step that ran.
    """
    if timed_out:
        return ExecutionResult(
            success=False, output=stdout, error=timeout_message, kind=FailureKind.timeout
        )
    if build_exit is not None and build_exit != 0:
        return ExecutionResult(
            success=False,
            output="",
            error=_diagnostic(stderr, stdout, build_exit),
            kind=FailureKind.build,
        )
    if run_exit is None or run_exit != 0:
        # markers can also match runtime errors, so they only pick the kind
        kind = FailureKind.run
        if build_exit is None and any(m in stderr for m in compile_markers):
            kind = FailureKind.build
        return ExecutionResult(
            success=False,
            output=stdout,
            error=_diagnostic(stderr, stdout, run_exit),
            kind=kind,
        )
    return ExecutionResult(success=True, output=stdout, error=None)


def classify_outcome(
    outcome: PipelineOutcome, template: LanguageTemplate
) -> ExecutionResult:
    last = outcome.run or outcome.build
    return classify(
        build_exit=outcome.build.returncode if outcome.build else None,
        run_exit=outcome.run.returncode if outcome.run else None,
        stdout=last.stdout if last else "",
        stderr=last.stderr if last else "",
        timed_out=outcome.timed_out,
        timeout_message=template.timeout_message,
        compile_markers=template.compile_markers,
    )
