import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # "xlsx" (local workbook file), "gsheets" (Google Sheets) or "memory"
    STORE_BACKEND: str = "xlsx"
    XLSX_PATH: str = "roster.xlsx"
    GOOGLE_SHEET_ID: str = ""
    GOOGLE_SERVICE_ACCOUNT_FILE: str = ""

    EMPLOYEES_SHEET: str = "Employees"
    POSITIONS_SHEET: str = "Positions"
    PREFERENCES_SHEET: str = "Preferences"
    BACKUP_SHEET: str = "Backup"

    PHOTO_DIR: str = "photos"
    PHOTO_URL_PREFIX: str = "/photos"
    PHOTO_MAX_BYTES: int = 5 * 1024 * 1024
    PHOTO_CLEANUP_ENABLED: bool = True
    PHOTO_MAX_AGE_DAYS: int = 30
    PHOTO_CLEANUP_INTERVAL_HOURS: float = 24.0

    AUTH_ENABLED: bool = True
    GOOGLE_CLIENT_ID: str = ""
    ALLOWED_EDITORS: list[str] = []

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
