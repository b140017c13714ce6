import os, logging

from playground.core.errors import StagingError
from playground.services.templates import LanguageTemplate

logger = logging.getLogger(__name__)


def apply_rewrites(template: LanguageTemplate, code: str) -> str:
    for local, remote in template.rewrites:
        code = code.replace(local, remote)
    return code


def stage_source(template: LanguageTemplate, code: str) -> None:
    """Overwrite the template's entry file with ``code``.

    The write is flushed and fsynced before returning so the build that
    follows never sees stale content. Caller must hold the language gate.
    """
    path = template.entry_path
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(code)
            f.flush()
            os.fsync(f.fileno())
    except OSError as exc:
        raise StagingError(f"failed to write {path}: {exc}") from exc
    logger.debug("staged %d bytes into %s", len(code), path)
