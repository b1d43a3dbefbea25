from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Shared secret presented by the game client (x-api-key header, apiKey query or socket handshake)
    api_key: str = ""

    # Aggregation
    max_group_members: int = 1000
    search_overfetch_factor: int = 5  # name search pulls limit * factor rows before filtering locally
    default_limit: int = 10
    max_limit: int = 100

    # App
    app_name: str = "grupos-gateway"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "https://www.roblox.com,https://web.roblox.com,http://localhost:3000,http://localhost:64537"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    rate_limit_enabled: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def store_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
