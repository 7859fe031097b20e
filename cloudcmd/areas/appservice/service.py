from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Protocol

from ...common_options import RetryPolicyOptions
from ...errors import AuthorizationError, InvalidArgumentError
from ..aws import AwsService, retry_config
from .models import DatabaseConnectionInfo

logger = logging.getLogger(__name__)


class AppServiceService(Protocol):
    async def add_database(
        self,
        app_name: str,
        resource_group: str,
        database_type: str,
        database_server: str,
        database_name: str,
        connection_string: str | None,
        subscription: str,
        *,
        tenant: str | None = None,
        retry_policy: RetryPolicyOptions | None = None,
    ) -> DatabaseConnectionInfo: ...


def build_connection_string(database_type: str, server: str, database: str) -> str:
    kind = (database_type or "").strip().lower()
    if kind == "sqlserver":
        return f"Server={server};Database={database};Trusted_Connection=True;TrustServerCertificate=True;"
    if kind == "mysql":
        return f"Server={server};Database={database};Uid={{username}};Pwd={{password}};"
    if kind == "postgresql":
        return f"Host={server};Database={database};Username={{username}};Password={{password}};"
    if kind == "cosmosdb":
        return f"AccountEndpoint=https://{server}.documents.azure.com:443/;AccountKey={{key}};Database={database};"
    raise InvalidArgumentError("database-type", f"Unsupported database type: {database_type}")


def connection_string_name(database_name: str) -> str:
    return f"{database_name}Connection"


def parameter_name(resource_group: str, app_name: str, name: str) -> str:
    return f"/appservice/{resource_group}/{app_name}/connection-strings/{name}"


class SsmAppServiceService(AwsService):
    """Stores App Service connection strings as SSM SecureString parameters."""

    async def add_database(
        self,
        app_name: str,
        resource_group: str,
        database_type: str,
        database_server: str,
        database_name: str,
        connection_string: str | None,
        subscription: str,
        *,
        tenant: str | None = None,
        retry_policy: RetryPolicyOptions | None = None,
    ) -> DatabaseConnectionInfo:
        return await self.run_sync(
            self._add_database,
            app_name,
            resource_group,
            database_type,
            database_server,
            database_name,
            connection_string,
            subscription,
            tenant,
            retry_policy,
        )

    def _add_database(
        self,
        app_name: str,
        resource_group: str,
        database_type: str,
        database_server: str,
        database_name: str,
        connection_string: str | None,
        subscription: str,
        tenant: str | None,
        retry_policy: RetryPolicyOptions | None,
    ) -> DatabaseConnectionInfo:
        value = (connection_string or "").strip() or build_connection_string(
            database_type, database_server, database_name
        )
        session = self.session(tenant)
        policy = retry_policy or RetryPolicyOptions()
        account = session.client("sts", config=retry_config(policy)).get_caller_identity().get("Account")
        if str(account or "") != subscription:
            raise AuthorizationError(
                f"credentials belong to account {account!r}, not subscription {subscription!r}"
            )

        name = connection_string_name(database_name)
        param = parameter_name(resource_group, app_name, name)
        session.client("ssm", config=retry_config(policy)).put_parameter(
            Name=param,
            Description=f"{database_type} connection for {app_name}",
            Value=value,
            Type="SecureString",
            Overwrite=True,
        )
        logger.info("stored connection string %s for app %s", name, app_name)
        return DatabaseConnectionInfo(
            database_type=database_type,
            database_server=database_server,
            database_name=database_name,
            connection_string=value,
            connection_string_name=name,
            is_configured=True,
            configured_at=datetime.now(timezone.utc),
            parameter_name=param,
        )
