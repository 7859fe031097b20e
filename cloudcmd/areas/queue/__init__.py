from __future__ import annotations

from ...config import Settings
from ...context import ServiceRegistry
from ...groups import CommandGroup
from .commands import QueueDetailsCommand, QueueListCommand, QueuePurgeCommand
from .service import QueueService, SqsQueueService


class QueueSetup:
    name = "queue"

    def configure_services(self, services: ServiceRegistry, settings: Settings) -> None:
        services.try_add_singleton(QueueService, SqsQueueService(settings))

    def register_commands(self, root: CommandGroup) -> None:
        queue = root.add_sub_group(CommandGroup("queue", "Message queue operations."))
        for command in (QueueListCommand(), QueueDetailsCommand(), QueuePurgeCommand()):
            queue.add_command(command.name, command)
