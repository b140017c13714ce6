import enum


class Language(str, enum.Enum):
    rust = "rust"
    typescript = "typescript"


class FailureKind(str, enum.Enum):
    timeout = "timeout"
    build = "build"
    run = "run"
    infrastructure = "infrastructure"
