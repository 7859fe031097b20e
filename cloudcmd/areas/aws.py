"""boto3 plumbing shared by the AWS-backed areas.

Subscription maps to the account id, tenant to the credential profile, and the
retry policy options to a ``botocore.config.Config``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, TypeVar

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, NoCredentialsError, PartialCredentialsError, ProfileNotFound

from ..classifier import AUTHENTICATION_MESSAGE, AUTHORIZATION_MESSAGE, CONFLICT_MESSAGE, ExceptionClassifier
from ..common_options import RetryPolicyOptions
from ..config import Settings

T = TypeVar("T")

THROTTLED_MESSAGE = "The request was throttled by the service. Retry later or raise --retry-max-retries."

_UNAUTHENTICATED_CODES = {
    "ExpiredToken",
    "ExpiredTokenException",
    "InvalidClientTokenId",
    "UnrecognizedClientException",
    "InvalidSignatureException",
}
_ACCESS_DENIED_CODES = {
    "AccessDenied",
    "AccessDeniedException",
    "AuthorizationError",
    "UnauthorizedOperation",
}
_NOT_FOUND_CODES = {
    "NotFoundException",
    "ResourceNotFoundException",
    "ParameterNotFound",
    "NoSuchEntity",
    "QueueDoesNotExist",
    "AWS.SimpleQueueService.NonExistentQueue",
}
_INVALID_CODES = {
    "ValidationError",
    "ValidationException",
    "InvalidParameterValue",
    "InvalidParameterException",
    "InvalidAttributeName",
    "InvalidAttributeValue",
}
_CONFLICT_CODES = {
    "ConflictException",
    "ResourceInUseException",
    "ParameterAlreadyExists",
    "PurgeQueueInProgress",
    "AWS.SimpleQueueService.PurgeQueueInProgress",
}
_THROTTLED_CODES = {
    "Throttling",
    "ThrottlingException",
    "TooManyRequestsException",
    "RequestLimitExceeded",
    "TooManyUpdates",
}


def client_error_code(exc: ClientError) -> str:
    return str((exc.response.get("Error") or {}).get("Code") or "")


def client_error_message(exc: ClientError) -> str:
    return str((exc.response.get("Error") or {}).get("Message") or "").strip() or str(exc)


def is_not_found(exc: ClientError) -> bool:
    return client_error_code(exc) in _NOT_FOUND_CODES


def retry_config(policy: RetryPolicyOptions) -> Config:
    return Config(
        retries={"max_attempts": int(policy.max_retries), "mode": policy.mode},
        connect_timeout=int(policy.network_timeout_seconds),
        read_timeout=int(policy.network_timeout_seconds),
    )


class AwsExceptionClassifier(ExceptionClassifier):
    """Maps botocore failures before falling back to the default policy."""

    def get_status_code(self, exc: BaseException) -> int:
        if isinstance(exc, (NoCredentialsError, PartialCredentialsError, ProfileNotFound)):
            return 401
        if isinstance(exc, ClientError):
            code = client_error_code(exc)
            if code in _UNAUTHENTICATED_CODES:
                return 401
            if code in _ACCESS_DENIED_CODES:
                return 403
            if code in _NOT_FOUND_CODES:
                return 404
            if code in _INVALID_CODES:
                return 400
            if code in _CONFLICT_CODES:
                return 409
            if code in _THROTTLED_CODES:
                return 429
            http_status = (exc.response.get("ResponseMetadata") or {}).get("HTTPStatusCode")
            if isinstance(http_status, int) and 400 <= http_status < 600:
                return http_status
            return 500
        return super().get_status_code(exc)

    def get_error_message(self, exc: BaseException) -> str:
        if isinstance(exc, (NoCredentialsError, PartialCredentialsError, ProfileNotFound)):
            return f"{AUTHENTICATION_MESSAGE} ({exc})"
        if isinstance(exc, ClientError):
            status = self.get_status_code(exc)
            if status == 401:
                return AUTHENTICATION_MESSAGE
            if status == 403:
                return AUTHORIZATION_MESSAGE
            if status == 404:
                return f"Resource not found: {client_error_message(exc)}"
            if status == 400:
                return f"Invalid parameter: {client_error_message(exc)}"
            if status == 409:
                return CONFLICT_MESSAGE
            if status == 429:
                return THROTTLED_MESSAGE
            return str(exc)
        return super().get_error_message(exc)


AWS_CLASSIFIER = AwsExceptionClassifier()


class AwsService:
    """Base for boto3-backed domain services.

    Sessions and clients are created per call inside a worker thread, so one
    service instance can serve concurrent invocations.
    """

    def __init__(self, settings: Settings, session_factory: Callable[..., Any] | None = None) -> None:
        self.settings = settings
        self._session_factory = session_factory or boto3.session.Session

    def session(self, tenant: str | None = None) -> Any:
        kwargs: dict[str, str] = {}
        if tenant:
            kwargs["profile_name"] = tenant
        if self.settings.region:
            kwargs["region_name"] = self.settings.region
        return self._session_factory(**kwargs)

    def client(self, service_name: str, *, tenant: str | None = None, retry_policy: RetryPolicyOptions | None = None) -> Any:
        return self.session(tenant).client(service_name, config=retry_config(retry_policy or RetryPolicyOptions()))

    async def run_sync(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        return await asyncio.to_thread(func, *args, **kwargs)
