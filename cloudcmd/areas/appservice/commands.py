from __future__ import annotations

from ...commands import BaseCommand, ToolMetadata
from ...common_options import CommonOptions, bind_subscription_options, register_subscription_options
from ...context import CommandContext
from ...options import OptionSet, ParseResult
from ...response import ResponseResult
from ..aws import AWS_CLASSIFIER
from .options import AppServiceOptionDefinitions, AppServiceOptions, DatabaseAddOptions
from .service import AppServiceService

ACCESS_DENIED_MESSAGE = "Access denied. Verify you have Contributor permissions on the App Service."
INVALID_STATE_MESSAGE = "The App Service is not in a valid state for this operation."


class BaseAppServiceCommand(BaseCommand):
    """Options every App Service command shares: scope plus the app name."""

    classifier = AWS_CLASSIFIER

    def register_options(self, options: OptionSet) -> None:
        register_subscription_options(options, resource_group=CommonOptions.RESOURCE_GROUP.as_required())
        options.add(AppServiceOptionDefinitions.APP_NAME)

    def bind_app_options(self, parse_result: ParseResult) -> AppServiceOptions:
        return AppServiceOptions(
            scope=bind_subscription_options(parse_result),
            app_name=parse_result.get(AppServiceOptionDefinitions.APP_NAME),
        )


class DatabaseAddCommand(BaseAppServiceCommand):
    name = "add"
    title = "Add Database to App Service"
    description = """
    Add a database connection to an App Service application. Creates or updates
    the connection string in the application's configuration and returns the
    stored connection details.

    Required: app-name, resource-group, database-type (SqlServer, MySql,
    PostgreSql, CosmosDb), database-server, database-name. The connection string
    is generated from these when --connection-string is not given.
    """
    metadata = ToolMetadata(destructive=False, read_only=False)

    def register_options(self, options: OptionSet) -> None:
        super().register_options(options)
        options.extend(
            AppServiceOptionDefinitions.DATABASE_TYPE,
            AppServiceOptionDefinitions.DATABASE_SERVER,
            AppServiceOptionDefinitions.DATABASE_NAME,
            AppServiceOptionDefinitions.CONNECTION_STRING,
        )

    def bind_options(self, parse_result: ParseResult) -> DatabaseAddOptions:
        return DatabaseAddOptions(
            app=self.bind_app_options(parse_result),
            database_type=parse_result.get(AppServiceOptionDefinitions.DATABASE_TYPE),
            database_server=parse_result.get(AppServiceOptionDefinitions.DATABASE_SERVER),
            database_name=parse_result.get(AppServiceOptionDefinitions.DATABASE_NAME),
            connection_string=parse_result.get(AppServiceOptionDefinitions.CONNECTION_STRING),
        )

    async def run(self, context: CommandContext, options: DatabaseAddOptions) -> None:
        service = context.get_service(AppServiceService)
        scope = options.app.scope
        info = await service.add_database(
            options.app.app_name,
            scope.resource_group,
            options.database_type,
            options.database_server,
            options.database_name,
            options.connection_string,
            scope.subscription,
            tenant=scope.tenant,
            retry_policy=scope.retry_policy,
        )
        context.response.set_results(ResponseResult.create({"databaseConnection": info}))

    def get_error_message(self, exc: BaseException) -> str:
        status = self.get_status_code(exc)
        if status == 403:
            return ACCESS_DENIED_MESSAGE
        if status == 409:
            return INVALID_STATE_MESSAGE
        if status == 400 and isinstance(exc, ValueError):
            return f"Invalid parameter: {exc}"
        return super().get_error_message(exc)
