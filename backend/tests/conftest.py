import os
import sys
import time
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from playground.core.enums import Language
from playground.services.templates import LanguageRegistry, LanguageTemplate

PY = sys.executable

# stand-in "compiler": fails with a SyntaxError traceback on stderr
CHECK_SYNTAX = "import sys; compile(open(sys.argv[1]).read(), sys.argv[1], 'exec')"


def make_template(
    root: Path,
    language: Language,
    *,
    timeout: float = 10.0,
    separate_build: bool = True,
    **overrides,
) -> LanguageTemplate:
    """A template whose toolchain is the Python interpreter.

    The staged entry file is executed as a Python script; with
    ``separate_build`` a syntax check runs first as the build step.
    """
    entry = Path("src/main.rs") if language is Language.rust else Path("src/index.ts")
    (root / entry).parent.mkdir(parents=True, exist_ok=True)
    (root / entry).write_text("")
    fields = dict(
        language=language,
        root=root,
        entry_file=entry,
        build_command=(PY, "-c", CHECK_SYNTAX, str(entry)) if separate_build else None,
        run_command=(PY, str(entry)),
        timeout=timeout,
        compile_markers=() if separate_build else ("SyntaxError",),
    )
    fields.update(overrides)
    return LanguageTemplate(**fields)


def process_gone(pid: int, wait: float = 3.0) -> bool:
    deadline = time.monotonic() + wait
    while time.monotonic() < deadline:
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return True
        try:
            status = Path(f"/proc/{pid}/status").read_text()
        except FileNotFoundError:
            return True
        if "State:\tZ" in status:
            return True
        time.sleep(0.05)
    return False


@pytest.fixture
def rust_timeout():
    return 10.0


@pytest.fixture
def ts_timeout():
    return 10.0


@pytest.fixture
def rust_template(tmp_path, rust_timeout):
    return make_template(tmp_path / "template-rs", Language.rust, timeout=rust_timeout)


@pytest.fixture
def ts_template(tmp_path, ts_timeout):
    return make_template(
        tmp_path / "template-ts",
        Language.typescript,
        timeout=ts_timeout,
        separate_build=False,
    )


@pytest.fixture
def registry(rust_template, ts_template):
    return LanguageRegistry([rust_template, ts_template])


@pytest_asyncio.fixture
async def client(registry):
    from playground.api.deps import get_registry
    from playground.main import app

    app.dependency_overrides[get_registry] = lambda: registry
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
