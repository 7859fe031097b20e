from __future__ import annotations

import logging

from ...commands import BaseCommand, ToolMetadata, ValidationResult
from ...common_options import CommonOptions, bind_subscription_options, register_subscription_options
from ...context import CommandContext
from ...options import OptionSet, ParseResult
from ...response import CommandResponse, ResponseResult
from ..aws import AWS_CLASSIFIER
from .options import MAX_RESULTS_LIMIT, QueueListOptions, QueueOptionDefinitions, QueueOptions
from .service import QueueService

logger = logging.getLogger(__name__)

NO_QUEUES_MESSAGE = "No queues found for the given subscription and filters."


class QueueListCommand(BaseCommand):
    name = "list"
    title = "List Queues"
    description = """
    List the queues owned by a subscription, optionally narrowed to one resource
    group and a name prefix. Returns an empty list with an explanatory message
    when nothing matches.
    """
    metadata = ToolMetadata(destructive=False, read_only=True)
    classifier = AWS_CLASSIFIER

    def register_options(self, options: OptionSet) -> None:
        register_subscription_options(options, resource_group=CommonOptions.RESOURCE_GROUP)
        options.extend(QueueOptionDefinitions.PREFIX, QueueOptionDefinitions.MAX_RESULTS)

    def bind_options(self, parse_result: ParseResult) -> QueueListOptions:
        return QueueListOptions(
            scope=bind_subscription_options(parse_result),
            prefix=parse_result.get(QueueOptionDefinitions.PREFIX),
            max_results=int(parse_result.get(QueueOptionDefinitions.MAX_RESULTS)),
        )

    def validate(self, parse_result: ParseResult, response: CommandResponse | None = None) -> ValidationResult:
        result = super().validate(parse_result, response)
        if not result.is_valid:
            return result
        max_results = parse_result.get(QueueOptionDefinitions.MAX_RESULTS)
        if not 1 <= max_results <= MAX_RESULTS_LIMIT:
            return self.validation_failure(response, f"--max-results must be between 1 and {MAX_RESULTS_LIMIT}")
        return result

    async def run(self, context: CommandContext, options: QueueListOptions) -> None:
        service = context.get_service(QueueService)
        queues = await service.list_queues(
            options.scope.subscription,
            options.scope.resource_group,
            prefix=options.prefix,
            max_results=options.max_results,
            tenant=options.scope.tenant,
            retry_policy=options.scope.retry_policy,
        )
        if not queues:
            context.response.set_results(ResponseResult.create({"queues": [], "message": NO_QUEUES_MESSAGE}))
            return
        context.response.set_results(ResponseResult.create({"queues": queues}))


class QueueDetailsCommand(BaseCommand):
    name = "details"
    title = "Get Queue Details"
    description = """
    Get the runtime details of one queue: message counts, retention, visibility
    timeout and dead-letter configuration.
    """
    metadata = ToolMetadata(destructive=False, read_only=True)
    classifier = AWS_CLASSIFIER

    def register_options(self, options: OptionSet) -> None:
        register_subscription_options(options, resource_group=CommonOptions.RESOURCE_GROUP.as_required())
        options.add(QueueOptionDefinitions.QUEUE)

    def bind_options(self, parse_result: ParseResult) -> QueueOptions:
        return QueueOptions(
            scope=bind_subscription_options(parse_result),
            queue=parse_result.get(QueueOptionDefinitions.QUEUE),
        )

    async def run(self, context: CommandContext, options: QueueOptions) -> None:
        service = context.get_service(QueueService)
        details = await service.get_queue_details(
            options.queue,
            options.scope.subscription,
            options.scope.resource_group,
            tenant=options.scope.tenant,
            retry_policy=options.scope.retry_policy,
        )
        context.response.set_results(ResponseResult.create({"queueDetails": details}))


class QueuePurgeCommand(BaseCommand):
    name = "purge"
    title = "Purge Queue"
    description = """
    Delete every message currently in a queue. The queue itself is kept.
    """
    metadata = ToolMetadata(destructive=True, read_only=False)
    classifier = AWS_CLASSIFIER

    def register_options(self, options: OptionSet) -> None:
        register_subscription_options(options, resource_group=CommonOptions.RESOURCE_GROUP.as_required())
        options.add(QueueOptionDefinitions.QUEUE)

    def bind_options(self, parse_result: ParseResult) -> QueueOptions:
        return QueueOptions(
            scope=bind_subscription_options(parse_result),
            queue=parse_result.get(QueueOptionDefinitions.QUEUE),
        )

    async def run(self, context: CommandContext, options: QueueOptions) -> None:
        service = context.get_service(QueueService)
        await service.purge_queue(
            options.queue,
            options.scope.subscription,
            options.scope.resource_group,
            tenant=options.scope.tenant,
            retry_policy=options.scope.retry_policy,
        )
        logger.info("purge requested for queue %s", options.queue)
        context.response.set_results(ResponseResult.create({"queue": options.queue, "purged": True}))
