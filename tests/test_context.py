from __future__ import annotations

import pytest

from cloudcmd.context import Activity, CommandContext, InvocationState, ServiceRegistry
from cloudcmd.errors import ServiceNotAvailableError


class _Clock:
    pass


def test_registry_singletons_and_factories() -> None:
    services = ServiceRegistry()
    clock = _Clock()
    services.add_singleton(_Clock, clock)
    calls: list[int] = []
    services.add_factory("counter", lambda registry: calls.append(1) or len(calls))

    assert services.get(_Clock) is clock
    assert services.get("counter") == 1
    assert services.get("counter") == 2
    assert _Clock in services


def test_registry_rejects_duplicates_but_try_add_keeps_first() -> None:
    services = ServiceRegistry()
    first = _Clock()
    services.add_singleton(_Clock, first)
    with pytest.raises(ValueError):
        services.add_factory(_Clock, lambda registry: _Clock())
    assert services.try_add_singleton(_Clock, _Clock()) is False
    assert services.get(_Clock) is first


def test_missing_service_raises_service_not_available() -> None:
    context = CommandContext(ServiceRegistry())
    with pytest.raises(ServiceNotAvailableError, match="_Clock"):
        context.get_service(_Clock)


def test_invocation_is_single_pass() -> None:
    context = CommandContext(ServiceRegistry())
    assert context.state is InvocationState.CREATED
    with pytest.raises(RuntimeError):
        context.transition(InvocationState.EXECUTING)
    for state in (
        InvocationState.BOUND,
        InvocationState.VALIDATED,
        InvocationState.EXECUTING,
        InvocationState.SUCCEEDED,
    ):
        context.transition(state)
    assert context.finished
    with pytest.raises(RuntimeError):
        context.transition(InvocationState.BOUND)


def test_activity_tags_skip_none() -> None:
    activity = Activity("queue list")
    activity.add_tag("status", 200)
    activity.add_tag("error.type", None)
    assert activity.tags == {"status": "200"}
    assert activity.duration_ms() >= 0
