"""
CampusLog Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Backend credentials and the two identifiers per domain (where rows
       live, where uploads go) must come from the environment, never from
       the request path.
How:   Pydantic Settings reads environment variables (or a .env file),
       validates types/ranges, and exposes a singleton `settings` object.
       The application factory also accepts an explicit Settings instance,
       which is how the tests run against SQLite and a temp directory.
Who:   Read by main.py and container.py; services never import it.

Backends:
    STORE_BACKEND=sheets    Google Sheets API (production)
    STORE_BACKEND=database  SQL table via async SQLAlchemy (local dev, tests)
    BLOB_BACKEND=drive      Google Drive folder, public-read links
    BLOB_BACKEND=local      Files under STORAGE_ROOT served by /files
"""

from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults are safe for development; production deployments must set the
    Google credentials and every spreadsheet/folder id they use.
    """

    # ── Backend Selection ─────────────────────────────────────────────────
    store_backend: Literal["sheets", "database"] = Field(default="sheets")
    blob_backend: Literal["drive", "local"] = Field(default="drive")

    # ── Google Credentials ────────────────────────────────────────────────
    # What: Service-account JSON, either inline (hosted deployments) or as a
    # key file next to the process (local development)
    google_credentials: str = Field(
        default="",
        description="Inline service-account JSON (takes precedence over the file)",
    )
    google_credentials_file: str = Field(default="credentials.json")

    # ── Domain Locations ──────────────────────────────────────────────────
    # What: One spreadsheet per log plus the folder its uploads land in.
    # Departments, employees and students share a single spreadsheet.
    buslog_spreadsheet_id: str = Field(default="")
    buslog_folder_id: str = Field(default="")
    generatorlog_spreadsheet_id: str = Field(default="")
    generatorlog_folder_id: str = Field(default="")
    filelog_spreadsheet_id: str = Field(default="")
    filelog_folder_id: str = Field(default="")
    directory_spreadsheet_id: str = Field(default="")

    # What: Write the declared header row into empty tables at startup.
    # Existing headers are never rewritten.
    bootstrap_headers: bool = Field(default=False)

    # ── Database (STORE_BACKEND=database) ─────────────────────────────────
    database_url: str = Field(
        default="sqlite+aiosqlite:///./campuslog.db",
        description="Async SQLAlchemy connection URL",
    )
    # Pool sizing only applies to server databases; SQLite ignores it.
    db_pool_size: int = Field(default=20, ge=5, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)
    # What: Create the table_rows table at startup (Alembic is used otherwise)
    database_auto_create: bool = Field(default=True)

    # ── Local Blob Storage (BLOB_BACKEND=local) ───────────────────────────
    storage_root: str = Field(default="./storage")
    public_base_url: str = Field(default="http://localhost:8000")

    # What: Maximum attachment size in bytes (10MB)
    max_file_size: int = Field(default=10_485_760, ge=1_048_576, le=52_428_800)

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def validate_required_for_production(self) -> None:
        """
        What:  Checks that the selected backends have what they need.
        When:  Called during app startup (lifespan), before clients are built.
        Why:   A missing spreadsheet id otherwise surfaces as a 500 on the
               first request that touches it.
        """
        errors = []
        if self.store_backend == "sheets":
            for name in (
                "buslog_spreadsheet_id",
                "generatorlog_spreadsheet_id",
                "filelog_spreadsheet_id",
                "directory_spreadsheet_id",
            ):
                if not getattr(self, name):
                    errors.append(f"{name.upper()} is not set.")
        if self.blob_backend == "drive":
            for name in ("buslog_folder_id", "generatorlog_folder_id", "filelog_folder_id"):
                if not getattr(self, name):
                    errors.append(f"{name.upper()} is not set.")
        uses_google = self.store_backend == "sheets" or self.blob_backend == "drive"
        if uses_google and not self.google_credentials and not self.google_credentials_file:
            errors.append(
                "Neither GOOGLE_CREDENTIALS nor GOOGLE_CREDENTIALS_FILE is set."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance used by the module-level app in main.py
settings = Settings()
