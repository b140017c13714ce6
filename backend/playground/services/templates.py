import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from playground.core.config import Settings
from playground.core.enums import Language
from playground.services.gate import ExecutionGate

# stderr fragments that mark a compile error when a toolchain builds and
# runs in one command
RUST_COMPILE_MARKERS = ("error[E", "could not compile", "error: aborting due to")
TS_COMPILE_MARKERS = ("TypeScript error", "SyntaxError", "Transform failed", "error TS")

LOCAL_HTTP_ENDPOINT = "http://127.0.0.1:8899"
LOCAL_WS_ENDPOINT = "ws://127.0.0.1:8900"


@dataclass(frozen=True)
class LanguageTemplate:
    language: Language
    root: Path
    entry_file: Path
    run_command: tuple[str, ...]
    build_command: tuple[str, ...] | None = None
    timeout: float = 30.0
    compile_markers: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    rewrites: tuple[tuple[str, str], ...] = ()
    max_output_bytes: int = 1024 * 1024

    @property
    def entry_path(self) -> Path:
        return self.root / self.entry_file

    @property
    def timeout_message(self) -> str:
        return (
            f"Execution timed out after {self.timeout:g} seconds. "
            "Your code took too long to run."
        )

    def toolchains(self) -> set[str]:
        names = {self.run_command[0]}
        if self.build_command:
            names.add(self.build_command[0])
        return names


def _split(command: str) -> tuple[str, ...] | None:
    argv = tuple(shlex.split(command))
    return argv or None


def build_templates(settings: Settings) -> list[LanguageTemplate]:
    env = {
        "SOLANA_URL": settings.SOLANA_URL,
        "SOLANA_WS_URL": settings.SOLANA_WS_URL,
        **settings.PASSTHROUGH_ENV,
    }
    rewrites = ()
    if settings.REWRITE_LOCAL_ENDPOINTS:
        rewrites = (
            (LOCAL_HTTP_ENDPOINT, settings.SOLANA_URL),
            (LOCAL_WS_ENDPOINT, settings.SOLANA_WS_URL),
        )
    specs = [
        (
            Language.rust,
            settings.TEMPLATE_RS,
            settings.RUST_ENTRY_FILE,
            settings.RUST_BUILD_COMMAND,
            settings.RUST_RUN_COMMAND,
            settings.RUST_TIMEOUT_S,
            RUST_COMPILE_MARKERS,
        ),
        (
            Language.typescript,
            settings.TEMPLATE_TS,
            settings.TS_ENTRY_FILE,
            settings.TS_BUILD_COMMAND,
            settings.TS_RUN_COMMAND,
            settings.TS_TIMEOUT_S,
            TS_COMPILE_MARKERS,
        ),
    ]
    templates = []
    for language, root, entry, build, run, timeout, markers in specs:
        run_argv = _split(run)
        if run_argv is None:
            raise ValueError(f"run command for {language.value} must not be empty")
        templates.append(
            LanguageTemplate(
                language=language,
                root=Path(root),
                entry_file=Path(entry),
                build_command=_split(build),
                run_command=run_argv,
                timeout=timeout,
                compile_markers=markers,
                env=env,
                rewrites=rewrites,
                max_output_bytes=settings.MAX_OUTPUT_BYTES,
            )
        )
    return templates


@dataclass
class LanguageSlot:
    template: LanguageTemplate
    gate: ExecutionGate


class LanguageRegistry:
    """One template and one gate per supported language, fixed at startup."""

    def __init__(self, templates: Iterable[LanguageTemplate]):
        self._slots: dict[Language, LanguageSlot] = {}
        for t in templates:
            if t.language in self._slots:
                raise ValueError(f"duplicate template for {t.language.value}")
            self._slots[t.language] = LanguageSlot(t, ExecutionGate(t.language))
        missing = [lang.value for lang in Language if lang not in self._slots]
        if missing:
            raise ValueError(f"no template configured for: {', '.join(missing)}")

    def get(self, language: Language) -> LanguageSlot:
        return self._slots[language]

    def __iter__(self):
        return iter(self._slots.values())
