import asyncio
import socket

import pyodbc

from catalog.naming import NAMESPACE_MARKER
from common.config import config
from common.errors import EntityStoreError
from common.logging import get_logger
from models.entity import RawEntityRecord

logger = get_logger(__name__)

ENTITY_QUERY = """SELECT
    e.Id AS EntityId,
    e.Name AS EntityName,
    e.Type AS EntityType
FROM [{database}].[dbo].[EntityLookupTable] e
WHERE e.Name LIKE ?
ORDER BY e.Name"""


def is_reachable(host: str, port: int, timeout: float) -> bool:
    """Try a TCP connect to host:port."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def select_sql_host(port: int, candidates: list[str], timeout: float) -> str:
    """First reachable candidate; the first candidate when none answers so the error surfaces on connect."""
    for host in candidates:
        if is_reachable(host, port, timeout):
            return host
    logger.warning(f"No SQL host reachable on port {port} (tried {', '.join(candidates)})")
    return candidates[0] if candidates else "127.0.0.1"


def build_sql_connection_string() -> str:
    """
    Resolve the ODBC connection string for the emulator's SQL Server.

    Uses ASB_SQL_CONNECTIONSTRING when set; otherwise assembles one from
    ASB_SQL_PORT and ASB_SQL_PASSWORD, probing the configured hosts.
    Returns an empty string when neither is configured.
    """
    explicit = config.asb_sql_connectionstring.get_secret_value()
    if explicit:
        return explicit

    password = config.asb_sql_password.get_secret_value()
    if not config.asb_sql_port or not password:
        return ""

    try:
        port = int(config.asb_sql_port)
    except ValueError:
        logger.warning(f"ASB_SQL_PORT is not a number: {config.asb_sql_port!r}")
        return ""

    host = select_sql_host(port, config.asb_sql_host_candidates, config.asb_sql_probe_timeout)
    return (
        f"DRIVER={{{config.asb_sql_driver}}};SERVER={host},{port};DATABASE={config.asb_sql_database};"
        f"UID={config.asb_sql_user};PWD={password};TrustServerCertificate=yes"
    )


class EmulatorSqlClient:
    """Reads raw entity rows from the emulator's EntityLookupTable."""

    def __init__(self, connection_string: str | None = None):
        self._connection_string = connection_string
        self.query = config.asb_sql_entity_query or ENTITY_QUERY.format(database=config.asb_sql_database)
        self.timeout = config.asb_sql_query_timeout

    @property
    def connection_string(self) -> str:
        """Resolved lazily; host probing only happens on first use."""
        if self._connection_string is None:
            self._connection_string = build_sql_connection_string()
        return self._connection_string

    @property
    def is_configured(self) -> bool:
        return bool(self.connection_string)

    async def get_records(self) -> list[RawEntityRecord]:
        """Fetch every namespace row. Empty when no connection is configured."""
        if not self.is_configured:
            logger.warning("No emulator SQL connection configured; entity catalog will be empty")
            return []

        rows = await asyncio.to_thread(self._fetch_rows)
        records = [RawEntityRecord.from_row(row) for row in rows]
        logger.info(f"Read {len(records)} entity rows from EntityLookupTable")
        return records

    def _fetch_rows(self) -> list[dict]:
        """Run the lookup query (blocking)."""
        try:
            conn = pyodbc.connect(self.connection_string, timeout=self.timeout)
        except pyodbc.Error as e:
            logger.error(f"Emulator SQL connection failed: {e}")
            raise EntityStoreError(f"Emulator SQL connection error: {e}") from e

        try:
            cursor = conn.cursor()
            cursor.execute(self.query, f"{NAMESPACE_MARKER}%")
            columns = [desc[0] for desc in cursor.description]
            rows = [dict(zip(columns, row)) for row in cursor.fetchall()]
            cursor.close()
            return rows
        except pyodbc.Error as e:
            logger.error(f"Entity lookup query failed: {e}")
            raise EntityStoreError(f"Entity lookup query error: {e}") from e
        finally:
            conn.close()
