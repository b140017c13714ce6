class InfrastructureError(Exception):
    """Server-side fault while preparing or launching a submission.

    ``public_message`` is what the caller sees; the exception itself (and its
    cause) only goes to the logs.
    """

    public_message = "Internal error while executing code"


class StagingError(InfrastructureError):
    public_message = "Internal error: could not prepare the project workspace"


class ToolchainSpawnError(InfrastructureError):
    public_message = "Internal error: the language toolchain is unavailable"
