from __future__ import annotations


class CloudCmdError(Exception):
    pass


class UsageError(CloudCmdError):
    """Raised before execution when arguments cannot be parsed or coerced."""


class OpError(CloudCmdError):
    pass


class AuthenticationError(CloudCmdError):
    pass


class AuthorizationError(CloudCmdError, PermissionError):
    pass


class InvalidArgumentError(CloudCmdError, ValueError):
    def __init__(self, argument: str, reason: str) -> None:
        super().__init__(f"{argument}: {reason}")
        self.argument = argument
        self.reason = reason


class ResourceNotFoundError(CloudCmdError):
    def __init__(self, resource: str, detail: str = "") -> None:
        msg = f"{resource} not found"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.resource = resource
        self.detail = detail


class ConflictError(CloudCmdError):
    pass


class ServiceNotAvailableError(CloudCmdError):
    def __init__(self, key: object) -> None:
        name = getattr(key, "__name__", None) or str(key)
        super().__init__(f"service not available: {name}")
        self.key = key
