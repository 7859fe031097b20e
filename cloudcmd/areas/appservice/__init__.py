from __future__ import annotations

from ...config import Settings
from ...context import ServiceRegistry
from ...groups import CommandGroup
from .commands import DatabaseAddCommand
from .service import AppServiceService, SsmAppServiceService


class AppServiceSetup:
    name = "appservice"

    def configure_services(self, services: ServiceRegistry, settings: Settings) -> None:
        services.try_add_singleton(AppServiceService, SsmAppServiceService(settings))

    def register_commands(self, root: CommandGroup) -> None:
        appservice = root.add_sub_group(CommandGroup("appservice", "App Service operations."))
        database = appservice.add_sub_group(CommandGroup("database", "App Service database connections."))
        add = DatabaseAddCommand()
        database.add_command(add.name, add)
