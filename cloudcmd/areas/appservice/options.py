from __future__ import annotations

from dataclasses import dataclass

from ...common_options import SubscriptionOptions
from ...options import OptionDefinition

DATABASE_TYPES = ("SqlServer", "MySql", "PostgreSql", "CosmosDb")


class AppServiceOptionDefinitions:
    APP_NAME = OptionDefinition(
        "app-name",
        "The name of the App Service application.",
        required=True,
    )
    # Free text so an unsupported type reaches the service and is reported as a 400.
    DATABASE_TYPE = OptionDefinition(
        "database-type",
        f"The type of database to add ({', '.join(DATABASE_TYPES)}).",
        required=True,
    )
    DATABASE_SERVER = OptionDefinition(
        "database-server",
        "The database server name or endpoint.",
        required=True,
    )
    DATABASE_NAME = OptionDefinition(
        "database-name",
        "The name of the database to connect to.",
        required=True,
    )
    CONNECTION_STRING = OptionDefinition(
        "connection-string",
        "The complete connection string. Built from the database type, server and name when omitted.",
    )


@dataclass(frozen=True)
class AppServiceOptions:
    scope: SubscriptionOptions
    app_name: str | None = None


@dataclass(frozen=True)
class DatabaseAddOptions:
    app: AppServiceOptions
    database_type: str | None = None
    database_server: str | None = None
    database_name: str | None = None
    connection_string: str | None = None
