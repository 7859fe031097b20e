from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from botocore.exceptions import ClientError

from ...common_options import RetryPolicyOptions
from ...errors import ResourceNotFoundError
from ..aws import AwsService, is_not_found
from .models import QueueDetails, QueueSummary

logger = logging.getLogger(__name__)

RESOURCE_GROUP_TAG = "resource-group"


class QueueService(Protocol):
    async def list_queues(
        self,
        subscription: str,
        resource_group: str | None = None,
        *,
        prefix: str | None = None,
        max_results: int = 100,
        tenant: str | None = None,
        retry_policy: RetryPolicyOptions | None = None,
    ) -> list[QueueSummary]: ...

    async def get_queue_details(
        self,
        queue: str,
        subscription: str,
        resource_group: str | None = None,
        *,
        tenant: str | None = None,
        retry_policy: RetryPolicyOptions | None = None,
    ) -> QueueDetails: ...

    async def purge_queue(
        self,
        queue: str,
        subscription: str,
        resource_group: str | None = None,
        *,
        tenant: str | None = None,
        retry_policy: RetryPolicyOptions | None = None,
    ) -> None: ...


def _queue_name(url: str) -> str:
    return url.rstrip("/").rsplit("/", 1)[-1]


def _queue_account(url: str) -> str:
    parts = url.rstrip("/").rsplit("/", 2)
    return parts[-2] if len(parts) == 3 else ""


def _int_or_none(raw: Any) -> int | None:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _details_from_attributes(name: str, url: str, resource_group: str | None, attrs: dict[str, Any]) -> QueueDetails:
    redrive: dict[str, Any] = {}
    raw_redrive = attrs.get("RedrivePolicy")
    if raw_redrive:
        try:
            redrive = json.loads(raw_redrive)
        except ValueError:
            logger.warning("queue %s has an unreadable RedrivePolicy", name)
    created = _int_or_none(attrs.get("CreatedTimestamp"))
    return QueueDetails(
        name=name,
        url=url,
        arn=attrs.get("QueueArn"),
        resource_group=resource_group,
        fifo=str(attrs.get("FifoQueue", "")).lower() == "true",
        approximate_message_count=_int_or_none(attrs.get("ApproximateNumberOfMessages")) or 0,
        approximate_in_flight_count=_int_or_none(attrs.get("ApproximateNumberOfMessagesNotVisible")) or 0,
        approximate_delayed_count=_int_or_none(attrs.get("ApproximateNumberOfMessagesDelayed")) or 0,
        visibility_timeout_seconds=_int_or_none(attrs.get("VisibilityTimeout")),
        message_retention_seconds=_int_or_none(attrs.get("MessageRetentionPeriod")),
        maximum_message_size_bytes=_int_or_none(attrs.get("MaximumMessageSize")),
        delay_seconds=_int_or_none(attrs.get("DelaySeconds")),
        dead_letter_target_arn=redrive.get("deadLetterTargetArn"),
        max_receive_count=_int_or_none(redrive.get("maxReceiveCount")),
        created_at=datetime.fromtimestamp(created, tz=timezone.utc) if created is not None else None,
    )


class SqsQueueService(AwsService):
    """SQS-backed queue operations; resource groups are the ``resource-group`` queue tag."""

    async def list_queues(
        self,
        subscription: str,
        resource_group: str | None = None,
        *,
        prefix: str | None = None,
        max_results: int = 100,
        tenant: str | None = None,
        retry_policy: RetryPolicyOptions | None = None,
    ) -> list[QueueSummary]:
        return await self.run_sync(
            self._list_queues, subscription, resource_group, prefix, max_results, tenant, retry_policy
        )

    async def get_queue_details(
        self,
        queue: str,
        subscription: str,
        resource_group: str | None = None,
        *,
        tenant: str | None = None,
        retry_policy: RetryPolicyOptions | None = None,
    ) -> QueueDetails:
        return await self.run_sync(self._get_queue_details, queue, subscription, resource_group, tenant, retry_policy)

    async def purge_queue(
        self,
        queue: str,
        subscription: str,
        resource_group: str | None = None,
        *,
        tenant: str | None = None,
        retry_policy: RetryPolicyOptions | None = None,
    ) -> None:
        await self.run_sync(self._purge_queue, queue, subscription, resource_group, tenant, retry_policy)

    def _list_queues(
        self,
        subscription: str,
        resource_group: str | None,
        prefix: str | None,
        max_results: int,
        tenant: str | None,
        retry_policy: RetryPolicyOptions | None,
    ) -> list[QueueSummary]:
        sqs = self.client("sqs", tenant=tenant, retry_policy=retry_policy)
        kwargs: dict[str, Any] = {}
        if prefix:
            kwargs["QueueNamePrefix"] = prefix
        out: list[QueueSummary] = []
        for page in sqs.get_paginator("list_queues").paginate(**kwargs):
            for url in page.get("QueueUrls") or []:
                if _queue_account(url) != subscription:
                    continue
                group = self._resource_group(sqs, url)
                if resource_group and group != resource_group:
                    continue
                out.append(QueueSummary(name=_queue_name(url), url=url, resource_group=group))
                if len(out) >= max_results:
                    return out
        return out

    def _get_queue_details(
        self,
        queue: str,
        subscription: str,
        resource_group: str | None,
        tenant: str | None,
        retry_policy: RetryPolicyOptions | None,
    ) -> QueueDetails:
        sqs = self.client("sqs", tenant=tenant, retry_policy=retry_policy)
        url, group = self._locate(sqs, queue, subscription, resource_group)
        attrs = sqs.get_queue_attributes(QueueUrl=url, AttributeNames=["All"]).get("Attributes") or {}
        return _details_from_attributes(queue, url, group, attrs)

    def _purge_queue(
        self,
        queue: str,
        subscription: str,
        resource_group: str | None,
        tenant: str | None,
        retry_policy: RetryPolicyOptions | None,
    ) -> None:
        sqs = self.client("sqs", tenant=tenant, retry_policy=retry_policy)
        url, _ = self._locate(sqs, queue, subscription, resource_group)
        sqs.purge_queue(QueueUrl=url)
        logger.info("purged queue %s", url)

    def _locate(self, sqs: Any, queue: str, subscription: str, resource_group: str | None) -> tuple[str, str | None]:
        try:
            url = str(sqs.get_queue_url(QueueName=queue, QueueOwnerAWSAccountId=subscription)["QueueUrl"])
        except ClientError as e:
            if is_not_found(e):
                raise ResourceNotFoundError(f"Queue '{queue}'", f"subscription '{subscription}'") from e
            raise
        group = self._resource_group(sqs, url)
        if resource_group and group != resource_group:
            raise ResourceNotFoundError(f"Queue '{queue}'", f"resource group '{resource_group}'")
        return url, group

    @staticmethod
    def _resource_group(sqs: Any, url: str) -> str | None:
        tags = sqs.list_queue_tags(QueueUrl=url).get("Tags") or {}
        return tags.get(RESOURCE_GROUP_TAG)
