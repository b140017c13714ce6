import asyncio
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse
from playground.api.deps import get_registry
from playground.services.runner import probe_toolchain
from playground.services.templates import LanguageRegistry

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
async def hello():
    return "Hello, World! Welcome to the Playground Service (Rust + TypeScript)"


@router.get("/health", response_class=PlainTextResponse)
async def health():
    return "ok"


@router.get("/health/ready")
async def ready(registry: LanguageRegistry = Depends(get_registry)):
    # probes run outside the gates; they never touch a workspace
    names = sorted({name for slot in registry for name in slot.template.toolchains()})
    results = await asyncio.gather(*(probe_toolchain(n) for n in names))
    toolchains = dict(zip(names, results))
    ok = all(results)
    return JSONResponse(
        {"ok": ok, "toolchains": toolchains}, status_code=200 if ok else 503
    )
