"""Maps a failure raised during execution to a status code and message.

The default policy:

- AuthenticationError: 401, fixed guidance
- AuthorizationError / PermissionError: 403, fixed guidance naming the role
- InvalidArgumentError / ValueError: 400, offending argument and reason
- JSONDecodeError / UnicodeError: 500, the exception's own text
- ResourceNotFoundError: 404, resource identity followed by "not found"
- ConflictError: 409, fixed guidance
- anything else: 500, the exception's own text verbatim

Classification is total: ``classify`` never raises.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from .errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidArgumentError,
    ResourceNotFoundError,
)

logger = logging.getLogger(__name__)

AUTHENTICATION_MESSAGE = (
    "Authentication failed. Sign in again or select a credential profile with --tenant."
)
AUTHORIZATION_MESSAGE = (
    "Authorization failed. Verify the calling identity has the Reader role (read operations) "
    "or the Contributor role (write operations) on the target resource."
)
CONFLICT_MESSAGE = "The resource is not in a valid state for this operation."

_DECODE_ERRORS = (json.JSONDecodeError, UnicodeError)

TROUBLESHOOTING_STEPS = "Re-run with --log-level DEBUG to see the full failure trace."


@dataclass(frozen=True)
class Classification:
    status: int
    message: str


def _own_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class ExceptionClassifier:
    def get_status_code(self, exc: BaseException) -> int:
        if isinstance(exc, AuthenticationError):
            return 401
        if isinstance(exc, PermissionError):
            return 403
        if isinstance(exc, ResourceNotFoundError):
            return 404
        if isinstance(exc, ConflictError):
            return 409
        if isinstance(exc, ValueError) and not isinstance(exc, _DECODE_ERRORS):
            return 400
        return 500

    def get_error_message(self, exc: BaseException) -> str:
        if isinstance(exc, AuthenticationError):
            return AUTHENTICATION_MESSAGE
        if isinstance(exc, (AuthorizationError, PermissionError)):
            return AUTHORIZATION_MESSAGE
        if isinstance(exc, ResourceNotFoundError):
            return _own_message(exc)
        if isinstance(exc, ConflictError):
            return CONFLICT_MESSAGE
        if isinstance(exc, InvalidArgumentError):
            return f"Invalid value for '{exc.argument}': {exc.reason}"
        if isinstance(exc, ValueError) and not isinstance(exc, _DECODE_ERRORS):
            return f"Invalid parameter: {_own_message(exc)}"
        return _own_message(exc)

    def classify(self, exc: BaseException) -> Classification:
        try:
            return Classification(
                status=int(self.get_status_code(exc)),
                message=str(self.get_error_message(exc)),
            )
        except Exception:
            logger.exception("failure classifier raised; falling back to 500")
            try:
                message = _own_message(exc)
            except Exception:
                message = type(exc).__name__
            return Classification(status=500, message=message)


DEFAULT_CLASSIFIER = ExceptionClassifier()
