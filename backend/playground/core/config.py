from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    APP_NAME: str = "Playground Execution Service"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # Template workspaces (prebuilt, dependencies already fetched)
    TEMPLATE_RS: str = "/app/template-rs"
    TEMPLATE_TS: str = "/app/template-ts"
    RUST_ENTRY_FILE: str = "src/main.rs"
    TS_ENTRY_FILE: str = "src/index.ts"

    # Toolchain commands, split with shlex; empty build command means none
    RUST_BUILD_COMMAND: str = "cargo build"
    RUST_RUN_COMMAND: str = "cargo run --quiet"
    TS_BUILD_COMMAND: str = ""
    TS_RUN_COMMAND: str = "pnpm run start"

    # Wall-clock budget per submission, build and run combined
    RUST_TIMEOUT_S: float = 30.0
    TS_TIMEOUT_S: float = 30.0

    MAX_CODE_BYTES: int = 256 * 1024
    MAX_OUTPUT_BYTES: int = 1024 * 1024

    # Endpoints exported to the executed programs
    SOLANA_URL: str = "http://solana-validator:8899"
    SOLANA_WS_URL: str = "ws://solana-validator:8900"
    PASSTHROUGH_ENV: dict[str, str] = {}
    REWRITE_LOCAL_ENDPOINTS: bool = False

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
