from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    ENV: str = "local"
    DB_HOST: str = "db"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "loaf"
    DB_URL: str | None = None   # full URL override (tests point this at sqlite)

    # Auth: tokens are issued by Supabase Auth, we only verify them
    SECRET_KEY: str = "dev-secret-change-me"       # the project's JWT secret in prod
    ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Workout sessions
    DEFAULT_SET_COUNT: int = 3
    SESSION_IDLE_MINUTES: int = 240
    MAX_SESSIONS_PER_PROFILE: int = 5

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return (
            f"postgresql+psycopg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()
