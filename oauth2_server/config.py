from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    SERVER_URI: str = "http://localhost:8000"
    AUTHORIZATION_GRANT_EXPIRE_SECONDS: int = 600
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 3600
    CODE_BYTES: int = 32
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
