from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_DIR = Path(__file__).resolve().parent

load_dotenv(PROJECT_ROOT / ".env")


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@dataclass(frozen=True)
class Settings:
    # storefront
    app_name: str = os.getenv("APP_NAME", "APK Store")
    host: str = os.getenv("APP_HOST", "0.0.0.0")
    port: int = _env_int("APP_PORT", 8080)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    templates_dir: Path = PACKAGE_DIR / "templates"
    static_dir: Path = PACKAGE_DIR / "static"

    # hosted backend; any SQLAlchemy URL, normally a Postgres DSN
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///data/apkstore.db")
    database_echo: bool = _env_flag("DATABASE_ECHO")

    # browser session
    secret_key: str = os.getenv("APP_SECRET_KEY", "change-this-secret-key")
    session_cookie: str = os.getenv("SESSION_COOKIE", "apkstore_session")
    session_https_only: bool = _env_flag("SESSION_HTTPS_ONLY")
    session_max_age_seconds: int = _env_int("SESSION_MAX_AGE_SECONDS", 28800)

    # first back-office account
    auto_bootstrap_admin: bool = _env_flag("AUTO_BOOTSTRAP_ADMIN", True)
    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    admin_username: str = os.getenv("ADMIN_USERNAME", "admin")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "ChangeMeNow1")

    @property
    def uses_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def sqlite_path(self) -> Path | None:
        if not self.database_url.startswith("sqlite:///"):
            return None
        # relative paths resolve against the working directory, as SQLite does
        return Path(self.database_url.replace("sqlite:///", "", 1))


settings = Settings()
