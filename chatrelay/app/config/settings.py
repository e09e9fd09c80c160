# chatrelay/app/config/settings.py
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Chat Relay Backend"
    DATABASE_URL: str  # required, startup fails without it
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # browsers outside this list are refused by the CORS middleware
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # relay tuning
    CHANNEL_SEND_TIMEOUT: float = 5.0
    CHANNEL_QUEUE_SIZE: int = 100

    PASSWORD_SCHEMES: List[str] = ["pbkdf2_sha256"]

    class Config:
        env_file = ".env"  # values in .env override the defaults above


settings = Settings()
