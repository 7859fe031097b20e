"""Well-known option definitions and the shared options shapes built from them.

Every command that needs a subscription, tenant, resource group or retry
policy references these definitions instead of declaring its own, so flag
names and semantics are identical across the whole command surface. Shared
fields are bound by ``bind_subscription_options`` before a command layers its
own fields on top.
"""

from __future__ import annotations

from dataclasses import dataclass

from .options import OptionDefinition, OptionKind, OptionSet, ParseResult

RETRY_MODES = ("legacy", "standard", "adaptive")


class CommonOptions:
    SUBSCRIPTION = OptionDefinition(
        "subscription",
        "The subscription (account id) that owns the target resources.",
        required=True,
        aliases=("sub",),
    )
    RESOURCE_GROUP = OptionDefinition(
        "resource-group",
        "The name of the resource group that contains the target resources.",
        aliases=("g",),
    )
    TENANT = OptionDefinition(
        "tenant",
        "The tenant (credential profile) used to authenticate. Uses the default credential chain when omitted.",
    )


class RetryPolicyOptionDefinitions:
    MAX_RETRIES = OptionDefinition(
        "retry-max-retries",
        "Maximum number of attempts for a failed request.",
        kind=OptionKind.INT,
        default=3,
    )
    MODE = OptionDefinition(
        "retry-mode",
        "Retry strategy applied by the service client.",
        kind=OptionKind.ENUM,
        choices=RETRY_MODES,
        default="standard",
    )
    NETWORK_TIMEOUT = OptionDefinition(
        "retry-network-timeout",
        "Connect and read timeout for each request, in seconds.",
        kind=OptionKind.INT,
        default=60,
    )

    ALL = (MAX_RETRIES, MODE, NETWORK_TIMEOUT)


@dataclass(frozen=True)
class RetryPolicyOptions:
    max_retries: int = 3
    mode: str = "standard"
    network_timeout_seconds: int = 60


@dataclass(frozen=True)
class SubscriptionOptions:
    subscription: str | None = None
    tenant: str | None = None
    resource_group: str | None = None
    retry_policy: RetryPolicyOptions = RetryPolicyOptions()


def register_subscription_options(options: OptionSet, *, resource_group: OptionDefinition | None = None) -> None:
    """Declare the shared subscription-scoped options.

    ``resource_group`` is usually ``CommonOptions.RESOURCE_GROUP`` or its
    ``as_required()`` variant; omit it for commands that are not scoped to a
    resource group.
    """
    options.extend(CommonOptions.SUBSCRIPTION, CommonOptions.TENANT)
    if resource_group is not None:
        options.add(resource_group)
    options.extend(*RetryPolicyOptionDefinitions.ALL)


def bind_retry_policy(parse_result: ParseResult) -> RetryPolicyOptions:
    return RetryPolicyOptions(
        max_retries=int(parse_result.get(RetryPolicyOptionDefinitions.MAX_RETRIES)),
        mode=str(parse_result.get(RetryPolicyOptionDefinitions.MODE)),
        network_timeout_seconds=int(parse_result.get(RetryPolicyOptionDefinitions.NETWORK_TIMEOUT)),
    )


def bind_subscription_options(parse_result: ParseResult) -> SubscriptionOptions:
    return SubscriptionOptions(
        subscription=parse_result.get(CommonOptions.SUBSCRIPTION),
        tenant=parse_result.get(CommonOptions.TENANT),
        resource_group=parse_result.get(CommonOptions.RESOURCE_GROUP),
        retry_policy=bind_retry_policy(parse_result),
    )


def retry_policy_errors(parse_result: ParseResult) -> list[str]:
    errors: list[str] = []
    max_retries = parse_result.get(RetryPolicyOptionDefinitions.MAX_RETRIES)
    if isinstance(max_retries, int) and not 0 <= max_retries <= 20:
        errors.append("--retry-max-retries must be between 0 and 20")
    timeout = parse_result.get(RetryPolicyOptionDefinitions.NETWORK_TIMEOUT)
    if isinstance(timeout, int) and timeout <= 0:
        errors.append("--retry-network-timeout must be greater than 0")
    return errors
