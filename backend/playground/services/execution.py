import asyncio, logging, time

from playground.core.enums import FailureKind
from playground.core.errors import InfrastructureError
from playground.schemas.execution import ExecutionResult
from playground.services.classifier import classify_outcome
from playground.services.runner import run_pipeline
from playground.services.stager import apply_rewrites, stage_source
from playground.services.templates import LanguageSlot

logger = logging.getLogger(__name__)


async def execute_submission(slot: LanguageSlot, code: str) -> ExecutionResult:
    """Stage ``code`` into the language workspace and build/run it.

    The gate is held from staging until the toolchain has exited (or been
    killed), so no other request can touch the workspace in between.
    """
    template = slot.template
    language = template.language.value
    code = apply_rewrites(template, code)
    started = time.monotonic()

    async with slot.gate.hold():
        try:
            await asyncio.to_thread(stage_source, template, code)
            outcome = await run_pipeline(template)
        except InfrastructureError as exc:
            logger.exception("%s submission failed: %s", language, exc)
            return ExecutionResult(
                success=False,
                output="",
                error=exc.public_message,
                kind=FailureKind.infrastructure,
            )

    result = classify_outcome(outcome, template)
    elapsed = time.monotonic() - started
    if result.kind is FailureKind.timeout:
        logger.warning("%s submission timed out after %.2fs", language, elapsed)
    elif result.kind is not None:
        logger.info("%s submission failed (%s) in %.2fs", language, result.kind.value, elapsed)
    else:
        logger.info("%s submission succeeded in %.2fs", language, elapsed)
    return result
