# daybook/config.py
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 43200  # 30 days

    STORAGE_BACKEND: str = "sql"              # sql | json | memory
    DATABASE_URL: str = "sqlite:///./daybook.db"
    DATA_DIR: str = "./data"

    DEBUG: bool = False
    LOG_FILE: str = "daybook.log"             # empty string disables the file handler

    RATE_LIMIT_ENABLED: bool = True
    AUTH_RATE_LIMIT: str = "5/minute"
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
