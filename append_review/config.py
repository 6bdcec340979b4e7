from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage settings
    local_store_path: str = "data/append_review.json"

    # Web server settings
    cors_allow_origins: list[str] = ["*"]

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
