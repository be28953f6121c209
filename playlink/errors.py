# Playlink Errors
# Exception hierarchy shared by all components


class PlaylinkError(Exception):
    """Base exception for playlink operations."""


class ConfigurationError(PlaylinkError):
    """Resource cannot run with the current configuration."""


class NetworkError(PlaylinkError):
    """Transport-level failure: DNS, refused connection, timeout."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class HookError(PlaylinkError):
    """An operator hook raised while being evaluated."""

    def __init__(self, checkpoint: str, hook_name: str, cause: BaseException):
        super().__init__(f"Hook '{hook_name}' failed at {checkpoint}: {cause}")
        self.checkpoint = checkpoint
        self.hook_name = hook_name
        self.cause = cause
