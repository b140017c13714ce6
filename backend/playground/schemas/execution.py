from pydantic import BaseModel, Field, field_validator
from playground.core.config import get_settings
from playground.core.enums import FailureKind


class CompileRequest(BaseModel):
    code: str

    @field_validator("code")
    @classmethod
    def within_size_limit(cls, v: str) -> str:
        try:
            encoded = v.encode("utf-8")
        except UnicodeEncodeError:
            raise ValueError("code must be valid UTF-8") from None
        limit = get_settings().MAX_CODE_BYTES
        if len(encoded) > limit:
            raise ValueError(f"code exceeds {limit} bytes")
        return v


class ExecutionResult(BaseModel):
    success: bool
    output: str = ""
    error: str | None = None
    # internal only, used for logging
    kind: FailureKind | None = Field(default=None, exclude=True)
