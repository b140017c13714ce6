import logging
from fastapi import APIRouter, Depends
from playground.api.deps import get_registry
from playground.core.enums import Language
from playground.schemas.execution import CompileRequest, ExecutionResult
from playground.services.execution import execute_submission
from playground.services.templates import LanguageRegistry

router = APIRouter(tags=["compile"])
logger = logging.getLogger(__name__)


@router.post("/rust", response_model=ExecutionResult)
async def compile_rust(
    payload: CompileRequest, registry: LanguageRegistry = Depends(get_registry)
):
    logger.info("received rust submission (%d chars)", len(payload.code))
    return await execute_submission(registry.get(Language.rust), payload.code)


@router.post("/typescript", response_model=ExecutionResult)
async def compile_typescript(
    payload: CompileRequest, registry: LanguageRegistry = Depends(get_registry)
):
    logger.info("received typescript submission (%d chars)", len(payload.code))
    return await execute_submission(registry.get(Language.typescript), payload.code)
