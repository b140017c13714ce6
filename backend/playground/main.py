import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from playground.core.config import get_settings
from playground.core.logging import setup_logging
from playground.api.deps import get_registry
from playground.api.routers import compile as r_compile
from playground.api.routers import health as r_health

settings = get_settings()
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(r_health.router)
app.include_router(r_compile.router)


@app.exception_handler(RequestValidationError)
async def invalid_submission(request: Request, exc: RequestValidationError):
    # submitted input is never echoed back
    errors = [
        {"type": e["type"], "loc": list(e["loc"]), "msg": e["msg"]}
        for e in exc.errors()
    ]
    return JSONResponse({"detail": errors}, status_code=422)


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"success": False, "output": "", "error": "Internal server error"},
        status_code=500,
    )


@app.on_event("startup")
async def report_configuration():
    logger.info("starting %s on %s:%d", settings.APP_NAME, settings.HOST, settings.PORT)
    logger.info("solana endpoints: %s %s", settings.SOLANA_URL, settings.SOLANA_WS_URL)
    for slot in get_registry():
        t = slot.template
        logger.info(
            "%s template root=%s entry=%s timeout=%gs",
            t.language.value,
            t.root,
            t.entry_file,
            t.timeout,
        )
        if not t.root.is_dir():
            logger.warning(
                "%s template directory does not exist: %s", t.language.value, t.root
            )


def serve():
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    serve()
