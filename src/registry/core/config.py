# src/registry/core/config.py
import secrets
import warnings
from datetime import date
from typing import Annotated, Optional, Union

from pydantic import PostgresDsn, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

INSECURE_SECRETS = {"changethis", "CHANGE_THIS_SECRET", "secret"}


class Settings(BaseSettings):
    # ---------------- General ----------------
    MODE: str = "development"
    PROJECT_NAME: str = "Supporter Registry"
    API_VERSION: str = "v1"

    # ---------------- Security ----------------
    SECRET_KEY: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 8
    BCRYPT_ROUNDS: int = 12

    # ---------------- Main DB ----------------
    DATABASE_USER: Optional[str] = None
    DATABASE_PASSWORD: Optional[str] = None
    DATABASE_HOST: Optional[str] = None
    DATABASE_PORT: int = 5432
    DATABASE_NAME: Optional[str] = None
    ASYNC_DATABASE_URI: Optional[Union[PostgresDsn, str]] = None
    SQLITE_PATH: str = "project29.db"
    DB_ECHO: bool = False

    # ---------------- Registry ----------------
    AGE_REFERENCE_DATE: date = date(2029, 10, 1)

    # ---------------- First admin ----------------
    FIRST_ADMIN_USERNAME: str = "admin"
    FIRST_ADMIN_PASSWORD: Optional[str] = None

    # ---------------- Logging ----------------
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"

    # ---------------- Performance ----------------
    DB_POOL_SIZE: int = 10
    WEB_CONCURRENCY: int = 2

    # ---------------- Computed ----------------
    @computed_field
    @property
    def POOL_SIZE(self) -> int:
        return max(self.DB_POOL_SIZE // max(1, self.WEB_CONCURRENCY), 2)

    @property
    def is_development(self) -> bool:
        return self.MODE.lower() == "development"

    @property
    def uses_sqlite(self) -> bool:
        return str(self.ASYNC_DATABASE_URI).startswith("sqlite")

    # ---------------- Validators ----------------
    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def check_bcrypt_rounds(cls, v: int) -> int:
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in {"text", "json"}:
            raise ValueError("LOG_FORMAT must be 'text' or 'json'")
        return v

    @model_validator(mode="after")
    def assemble_async_db_uri(self) -> "Settings":
        if self.ASYNC_DATABASE_URI:
            uri = str(self.ASYNC_DATABASE_URI)
            # plain postgres URLs get the async driver
            for prefix in ("postgresql://", "postgres://"):
                if uri.startswith(prefix):
                    uri = "postgresql+asyncpg://" + uri[len(prefix):]
            self.ASYNC_DATABASE_URI = uri
            return self
        if self.DATABASE_HOST:
            db_name = str(self.DATABASE_NAME or "").lstrip("/")
            self.ASYNC_DATABASE_URI = str(PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.DATABASE_USER or "",
                password=self.DATABASE_PASSWORD or "",
                host=self.DATABASE_HOST,
                port=int(self.DATABASE_PORT or 5432),
                path=db_name,
            ))
        else:
            self.ASYNC_DATABASE_URI = f"sqlite+aiosqlite:///{self.SQLITE_PATH}"
        return self

    @model_validator(mode="after")
    def check_required_secrets(self) -> "Settings":
        secret = self.SECRET_KEY
        if not self.is_development:
            if not secret or secret in INSECURE_SECRETS:
                raise ValueError("SECRET_KEY is not set or insecure. Update in production!")
            if self.DATABASE_HOST and not self.DATABASE_PASSWORD:
                raise ValueError("DATABASE_PASSWORD is not set. Update in production!")
            return self
        if not secret:
            warnings.warn(
                "SECRET_KEY is not set. Using a random per-process key; "
                "issued tokens will not survive a restart."
            )
            self.SECRET_KEY = secrets.token_urlsafe(32)
        elif secret in INSECURE_SECRETS:
            warnings.warn("SECRET_KEY is a known placeholder value. Never deploy it.")
        return self

    # ---------------- CORS ----------------
    BACKEND_CORS_ORIGINS: Annotated[list[str], NoDecode] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_backend_cors_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        elif isinstance(v, list):
            return v
        raise ValueError(f"Invalid cors origins: {v}")

    @computed_field
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS or []]

    # ---------------- Model Config ----------------
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
