from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from cloudcmd.areas.appservice.models import DatabaseConnectionInfo
from cloudcmd.areas.appservice.service import AppServiceService
from cloudcmd.areas.queue.models import QueueDetails, QueueSummary
from cloudcmd.areas.queue.service import QueueService
from cloudcmd.config import Settings
from cloudcmd.context import ServiceRegistry
from cloudcmd.dispatch import Runtime, build_runtime


class StubQueueService:
    """Records calls; returns the configured value or raises the configured error."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.queues: list[QueueSummary] = []
        self.details: QueueDetails | None = None
        self.error: BaseException | None = None

    def _record(self, op: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((op, args, kwargs))
        if self.error is not None:
            raise self.error

    async def list_queues(self, subscription, resource_group=None, **kwargs):
        self._record("list_queues", subscription, resource_group, **kwargs)
        return list(self.queues)

    async def get_queue_details(self, queue, subscription, resource_group=None, **kwargs):
        self._record("get_queue_details", queue, subscription, resource_group, **kwargs)
        assert self.details is not None
        return self.details

    async def purge_queue(self, queue, subscription, resource_group=None, **kwargs):
        self._record("purge_queue", queue, subscription, resource_group, **kwargs)


class StubAppServiceService:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.error: BaseException | None = None

    async def add_database(
        self,
        app_name,
        resource_group,
        database_type,
        database_server,
        database_name,
        connection_string,
        subscription,
        *,
        tenant=None,
        retry_policy=None,
    ):
        self.calls.append(
            (app_name, resource_group, database_type, database_server, database_name, connection_string, subscription)
        )
        if self.error is not None:
            raise self.error
        return DatabaseConnectionInfo(
            database_type=database_type,
            database_server=database_server,
            database_name=database_name,
            connection_string=connection_string or "Server=s;",
            connection_string_name=f"{database_name}Connection",
            is_configured=True,
            configured_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )


@pytest.fixture
def queue_details() -> QueueDetails:
    return QueueDetails(
        name="q1",
        url="https://sqs.us-east-1.amazonaws.com/111122223333/q1",
        arn="arn:aws:sqs:us-east-1:111122223333:q1",
        resource_group="rg1",
        approximate_message_count=3,
        visibility_timeout_seconds=30,
    )


@pytest.fixture
def queue_service() -> StubQueueService:
    return StubQueueService()


@pytest.fixture
def appservice_service() -> StubAppServiceService:
    return StubAppServiceService()


@pytest.fixture
def runtime(queue_service: StubQueueService, appservice_service: StubAppServiceService) -> Runtime:
    services = ServiceRegistry()
    services.add_singleton(QueueService, queue_service)
    services.add_singleton(AppServiceService, appservice_service)
    return build_runtime(Settings(region="us-east-1"), services=services)
