import asyncio, logging, os, signal, time
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from playground.core.errors import ToolchainSpawnError
from playground.services.templates import LanguageTemplate

logger = logging.getLogger(__name__)

# how long to keep draining pipes once the process group is gone
STREAM_GRACE_S = 2.0
_CHUNK = 64 * 1024


@dataclass
class StepOutcome:
    argv: tuple[str, ...]
    returncode: int | None
    stdout: str
    stderr: str
    timed_out: bool = False
    elapsed: float = 0.0


@dataclass
class PipelineOutcome:
    build: StepOutcome | None = None
    run: StepOutcome | None = None
    # budget ran out between build and run, run step never started
    budget_exhausted: bool = False

    @property
    def timed_out(self) -> bool:
        if self.budget_exhausted:
            return True
        return any(s.timed_out for s in (self.build, self.run) if s is not None)


class _Capture:
    def __init__(self, limit: int):
        self.limit = limit
        self.chunks: list[bytes] = []
        self.size = 0
        self.truncated = False

    async def drain(self, stream: asyncio.StreamReader) -> None:
        while True:
            chunk = await stream.read(_CHUNK)
            if not chunk:
                return
            room = self.limit - self.size
            if room > 0:
                kept = chunk[:room]
                self.chunks.append(kept)
                self.size += len(kept)
            if len(chunk) > room:
                self.truncated = True

    def text(self) -> str:
        text = b"".join(self.chunks).decode("utf-8", errors="replace")
        if self.truncated:
            text += f"\n[output truncated after {self.limit} bytes]\n"
        return text


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        # group already empty
        return


async def _settle(proc: asyncio.subprocess.Process, readers: list[asyncio.Task]) -> None:
    await proc.wait()
    done, pending = await asyncio.wait(readers, timeout=STREAM_GRACE_S)
    for t in pending:
        t.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
    for t in done:
        t.result()


async def run_step(
    argv: Sequence[str],
    *,
    cwd: Path | str,
    timeout: float,
    env: Mapping[str, str] | None = None,
    max_output_bytes: int = 1024 * 1024,
) -> StepOutcome:
    """Run one child process in its own process group.

    The whole group is SIGKILLed when ``timeout`` expires, when the calling
    task is cancelled, and after a normal exit (so background descendants do
    not outlive the request). Returns once the child is reaped.
    """
    argv = tuple(argv)
    started = time.monotonic()
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as exc:
        raise ToolchainSpawnError(f"could not start {argv[0]!r}: {exc}") from exc

    out, err = _Capture(max_output_bytes), _Capture(max_output_bytes)
    readers = [
        asyncio.create_task(out.drain(proc.stdout)),
        asyncio.create_task(err.drain(proc.stderr)),
    ]
    timed_out = False
    try:
        try:
            await asyncio.wait_for(proc.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            timed_out = True
    finally:
        _kill_group(proc)
        await _settle(proc, readers)

    elapsed = time.monotonic() - started
    logger.debug(
        "step %s exited rc=%s timed_out=%s in %.3fs",
        " ".join(argv),
        proc.returncode,
        timed_out,
        elapsed,
    )
    return StepOutcome(
        argv=argv,
        returncode=proc.returncode,
        stdout=out.text(),
        stderr=err.text(),
        timed_out=timed_out,
        elapsed=elapsed,
    )


async def run_pipeline(template: LanguageTemplate) -> PipelineOutcome:
    """Build (if the template has a build step) then run, sharing one budget.

    The budget starts at the first spawn. A failed or timed out build skips
    the run step.
    """
    env = {**os.environ, **template.env}
    loop = asyncio.get_running_loop()
    deadline = loop.time() + template.timeout
    outcome = PipelineOutcome()

    if template.build_command:
        outcome.build = await run_step(
            template.build_command,
            cwd=template.root,
            env=env,
            timeout=template.timeout,
            max_output_bytes=template.max_output_bytes,
        )
        if outcome.build.timed_out or outcome.build.returncode != 0:
            return outcome

    remaining = deadline - loop.time()
    if remaining <= 0:
        outcome.budget_exhausted = True
        return outcome

    outcome.run = await run_step(
        template.run_command,
        cwd=template.root,
        env=env,
        timeout=remaining,
        max_output_bytes=template.max_output_bytes,
    )
    return outcome


async def probe_toolchain(name: str, timeout: float = 10.0) -> bool:
    try:
        step = await run_step((name, "--version"), cwd=Path.cwd(), timeout=timeout)
    except ToolchainSpawnError:
        logger.warning("toolchain %s is not installed", name)
        return False
    return not step.timed_out and step.returncode == 0
