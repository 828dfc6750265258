import os  # environment variables (from the OS or .env)
from functools import lru_cache  # one Settings object per process

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()  # read .env into the process environment before Settings is built


class Settings(BaseModel):
    # database connection string; default is a SQLite file in the project folder
    # change effect: point to Postgres or another file; Alembic uses the same value
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./seasonbudget.db")

    # currency new budgets start with when the client does not send one
    base_currency: str = os.getenv("BASE_CURRENCY", "USD")

    # single locale used for every formatted amount so output is reproducible
    display_locale: str = os.getenv("DISPLAY_LOCALE", "en_US")

    # root level for the app loggers (sb.*, db)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@lru_cache
def get_settings() -> Settings:
    return Settings()
