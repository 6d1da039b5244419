import os

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    # Service Bus emulator (AMQP)
    asb_resource_name: str = "myservicebus"
    service_bus_connection_string: SecretStr = SecretStr("")
    service_bus_use_websocket: bool = False

    # Emulator SQL Server (EntityLookupTable)
    asb_sql_connectionstring: SecretStr = SecretStr("")
    asb_sql_port: str = ""
    asb_sql_user: str = "sa"
    asb_sql_password: SecretStr = SecretStr("")
    asb_sql_host_candidates: list[str] = ["127.0.0.1", "host.docker.internal"]
    asb_sql_database: str = "SbMessageContainerDatabase00001"
    asb_sql_driver: str = "ODBC Driver 18 for SQL Server"
    asb_sql_probe_timeout: float = 1.5
    asb_sql_query_timeout: int = 30
    asb_sql_entity_query: str = ""  # must take one ? parameter, the name LIKE pattern

    # Messages
    default_max_messages: int = 20
    receive_max_wait_time: int = 5
    default_content_type: str = "application/json"

    # Logging
    log_level: str = "INFO"
    log_format: str = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    def get_service_bus_connection_string(self) -> str:
        """Explicit connection string first, then the Aspire ConnectionStrings__{resource} convention."""
        explicit = self.service_bus_connection_string.get_secret_value()
        if explicit:
            return explicit

        name = self.asb_resource_name
        return os.environ.get(f"ConnectionStrings__{name}") or os.environ.get(f"ConnectionStrings:{name}") or ""


config = Config()
