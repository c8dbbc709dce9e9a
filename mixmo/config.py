from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="MIXMO_", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./mixmo.db"
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    cors_origins: list[str] = ["http://localhost:8000", "http://127.0.0.1:8000"]
    log_level: str = "INFO"

    # Grid policy used when a room is created without an explicit choice
    default_bounds_policy: str = "fixed"
    fixed_grid_width: int = 8
    fixed_grid_height: int = 8

    initial_rack_size: int = 6
    mixmo_draw_count: int = 4


settings = Settings()
