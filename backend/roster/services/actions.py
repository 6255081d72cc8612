"""Dispatches `{action, payload}` requests onto the roster and photo services.

Every call returns a dict with a `success` flag; failures never escape as
exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from roster.core import cells
from roster.services.photo_service import PhotoService
from roster.services.roster_service import BulkReplaceError, EmployeeNotFoundError, RosterError, RosterService
from roster.storage.base import StoreError

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], dict[str, Any]]


def _dump(model: Any) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


class ActionDispatcher:
    def __init__(self, roster: RosterService, photos: PhotoService) -> None:
        self.roster = roster
        self.photos = photos
        self._handlers: dict[str, Handler] = {
            "listEmployees": self._list_employees,
            "replaceAllEmployees": self._replace_all_employees,
            "addEmployee": self._add_employee,
            "updateEmployee": self._update_employee,
            "deleteEmployee": self._delete_employee,
            "listPositions": self._list_positions,
            "savePositions": self._save_positions,
            "getCurrentUserMarker": self._get_marker,
            "setCurrentUserMarker": self._set_marker,
            "clearCurrentUserMarker": self._clear_marker,
            "getSheetUrl": self._get_sheet_url,
            "backupEmployees": self._backup,
            "restoreEmployees": self._restore,
            "getBackupInfo": self._backup_info,
            "uploadPhoto": self._upload_photo,
        }

    @property
    def actions(self) -> list[str]:
        return sorted(self._handlers)

    def dispatch(self, action: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        handler = self._handlers.get(action)
        if handler is None:
            return {"success": False, "error": f"Unknown action: {action}"}

        try:
            result = handler(payload or {})
        except BulkReplaceError as e:
            logger.info("Action %s rejected: %s", action, e)
            return {"success": False, "error": str(e), "errors": [_dump(err) for err in e.errors]}
        except RosterError as e:
            logger.info("Action %s rejected: %s", action, e)
            return {"success": False, "error": str(e)}
        except StoreError as e:
            logger.exception("Action %s failed on the backing store", action)
            return {"success": False, "error": f"Roster store error: {e}"}
        except Exception:
            logger.exception("Action %s failed", action)
            return {"success": False, "error": f"Unexpected error while running {action}"}

        return {"success": True, **result}

    def _list_employees(self, payload: dict[str, Any]) -> dict[str, Any]:
        return {"employees": [_dump(employee) for employee in self.roster.list_employees()]}

    def _replace_all_employees(self, payload: dict[str, Any]) -> dict[str, Any]:
        return _dump(self.roster.replace_all_employees(payload.get("employees")))

    def _add_employee(self, payload: dict[str, Any]) -> dict[str, Any]:
        return {"employee": _dump(self.roster.add_employee(payload.get("employee")))}

    def _update_employee(self, payload: dict[str, Any]) -> dict[str, Any]:
        employee = self.roster.update_employee(payload.get("employee"), payload.get("originalId"))
        return {"employee": _dump(employee)}

    def _delete_employee(self, payload: dict[str, Any]) -> dict[str, Any]:
        emp_id = cells.clean_text(payload.get("empId"))
        self.roster.delete_employee(emp_id)
        return {"empId": emp_id}

    def _list_positions(self, payload: dict[str, Any]) -> dict[str, Any]:
        return {"positions": [_dump(position) for position in self.roster.list_positions()]}

    def _save_positions(self, payload: dict[str, Any]) -> dict[str, Any]:
        positions = self.roster.save_positions(payload.get("positions"))
        return {"positions": [_dump(position) for position in positions]}

    def _get_marker(self, payload: dict[str, Any]) -> dict[str, Any]:
        return {"empId": self.roster.get_current_user_marker()}

    def _set_marker(self, payload: dict[str, Any]) -> dict[str, Any]:
        return {"empId": self.roster.set_current_user_marker(payload.get("empId"))}

    def _clear_marker(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.roster.clear_current_user_marker()
        return {}

    def _get_sheet_url(self, payload: dict[str, Any]) -> dict[str, Any]:
        return {"url": self.roster.get_sheet_url()}

    def _backup(self, payload: dict[str, Any]) -> dict[str, Any]:
        return _dump(self.roster.backup_employees())

    def _restore(self, payload: dict[str, Any]) -> dict[str, Any]:
        return _dump(self.roster.restore_employees())

    def _backup_info(self, payload: dict[str, Any]) -> dict[str, Any]:
        info = self.roster.get_backup_info()
        return {"backup": _dump(info) if info else None}

    def _upload_photo(self, payload: dict[str, Any]) -> dict[str, Any]:
        emp_id = cells.clean_text(payload.get("empId"))
        if emp_id and self.roster.get_employee(emp_id) is None:
            raise EmployeeNotFoundError(f"Employee ID '{emp_id}' not found")

        url = self.photos.save_photo(
            payload.get("data") or "",
            payload.get("mimeType"),
            cells.clean_text(payload.get("fileName")),
        )
        result: dict[str, Any] = {"photoUrl": url}
        if emp_id:
            result["employee"] = _dump(self.roster.set_photo_url(emp_id, url))
        return result
