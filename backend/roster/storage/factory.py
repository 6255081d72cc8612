from __future__ import annotations

import logging

from roster.core.config import Settings
from roster.storage.base import StoreError, Workbook
from roster.storage.excel import ExcelWorkbook
from roster.storage.google_sheets import GoogleWorkbook
from roster.storage.memory import MemoryWorkbook

logger = logging.getLogger(__name__)


def open_workbook(settings: Settings) -> Workbook:
    backend = settings.STORE_BACKEND.lower()

    if backend == "memory":
        logger.warning("Using in-memory roster store; data is lost on restart")
        return MemoryWorkbook()

    if backend == "xlsx":
        return ExcelWorkbook(settings.XLSX_PATH)

    if backend == "gsheets":
        if not settings.GOOGLE_SHEET_ID or not settings.GOOGLE_SERVICE_ACCOUNT_FILE:
            raise StoreError("GOOGLE_SHEET_ID and GOOGLE_SERVICE_ACCOUNT_FILE are required for the gsheets store")
        return GoogleWorkbook.from_service_account(
            settings.GOOGLE_SHEET_ID,
            settings.GOOGLE_SERVICE_ACCOUNT_FILE,
        )

    raise StoreError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND!r}")
