from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./recipe_import.db"
    log_level: str = "INFO"

    # Entity resolution
    resolver_concurrency: int = 8
    fuzzy_match_limit: int = 1

    # Base-component linking: nested components sort after top-level ones
    sub_component_order_offset: int = 1000

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost",
        "http://127.0.0.1",
    ]


settings = Settings()
