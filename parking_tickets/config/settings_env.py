from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Development
    DEV_MODE: bool = Field(default=True, description="Enable debug mode")

    # Database
    ASYNC_DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./parking_tickets.db", description="Async database URL"
    )
    TICKETS_TABLE: str = Field(default="parkingTickets", min_length=1, description="Table holding ticket records")
    STORE_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0, description="Upper bound for a single store call")


# Create settings instance
settings = Settings()
