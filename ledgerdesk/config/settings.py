# ledgerdesk/config/settings.py
from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from the process, optionally from a local .env
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="dev", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="ledgerdesk", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))

    # Books API (upstream source of truth)
    BOOKS_API_BASE_URL: str = Field(
        default="http://localhost:5000/api",
        validation_alias=AliasChoices("BOOKS_API_BASE_URL", "books_api_base_url"),
    )
    BOOKS_API_TOKEN: str = Field(default="", validation_alias=AliasChoices("BOOKS_API_TOKEN", "books_api_token"))
    BOOKS_API_TIMEOUT: float = Field(default=30.0, validation_alias=AliasChoices("BOOKS_API_TIMEOUT", "books_api_timeout"))

    # Organisation
    SOURCE_STATE: str = Field(default="", validation_alias=AliasChoices("SOURCE_STATE", "source_state"))
    CURRENCY_SYMBOL: str = Field(default="₹", validation_alias=AliasChoices("CURRENCY_SYMBOL", "currency_symbol"))

    # Listing
    DEFAULT_PAGE_SIZE: int = Field(default=10, validation_alias=AliasChoices("DEFAULT_PAGE_SIZE", "default_page_size"))
    MAX_PAGE_SIZE: int = Field(default=100, validation_alias=AliasChoices("MAX_PAGE_SIZE", "max_page_size"))


settings = Settings()
