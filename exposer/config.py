from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Route Exposer"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./data/exposer.db"

    # Security settings
    secret_key: str = "change-me"
    token_algorithm: str = "HS256"

    # Routing settings
    namespace: str = "api-exposer/v1"
    upstream_base_url: str = "http://localhost:8080/wp-json"
    upstream_timeout: float = 30.0

    # Option names used to persist the route and discovery tables
    routes_option: str = "exposer_routes"
    discovered_option: str = "exposer_discovered_apis"

    # Reactivating a route re-checks slug uniqueness when enabled
    strict_slug_uniqueness: bool = False

    # Plugin settings
    plugins_dir: str = "plugins"
    plugins_config_file: str = "data/plugins_config.json"

    # Logging settings
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="EXPOSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def route_prefix(self) -> str:
        """Namespace rendered as a URL prefix, e.g. ``/api-exposer/v1``."""
        return "/" + self.namespace.strip("/")


settings = Settings()
