"""Registration console: draft form state, live password feedback, list view."""

import logging
import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..password_policy import PasswordChecks, check_password, is_password_valid
from .api_client import ApiError, UserApiClient

logger = logging.getLogger(__name__)

SKILL_OPTIONS = ("JavaScript", "React", "Node.js", "MySQL", "Python", "Java", "AWS", "Docker")
FALLBACK_ERROR = "Operation failed"
WEAK_PASSWORD = "Please ensure your password meets all security requirements"

CLIENT_ERRORS = (ApiError, httpx.HTTPError, ValueError)


@dataclass
class Draft:
    """Unsaved form values. The password only ever lives here, in memory."""

    name: str = ""
    email: str = ""
    password: str = ""
    phone: str = ""
    role: str = "user"
    skills: List[str] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


def error_message(exc: Exception) -> str:
    """First structured validation message, else the server message, else a fallback."""
    body = exc.body if isinstance(exc, ApiError) else None
    if not isinstance(body, dict):
        return FALLBACK_ERROR
    errors = body.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        if errors[0].get("msg"):
            return errors[0]["msg"]
    return body.get("message") or FALLBACK_ERROR


class RegistrationConsole:
    """Client-side controller for the registration form and user list.

    Password feedback is advisory; the server re-validates every request.
    Only one request runs at a time and failures become notifications
    instead of exceptions.
    """

    def __init__(self, api: UserApiClient):
        self.api = api
        self.users: List[Dict[str, Any]] = []
        self.draft = Draft()
        self.editing_id: Optional[int] = None
        self.notifications: List[Tuple[str, str]] = []
        self._in_flight = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    @property
    def password_checks(self) -> PasswordChecks:
        return check_password(self.draft.password)

    @property
    def is_password_valid(self) -> bool:
        return is_password_valid(self.draft.password, editing=self.editing_id is not None)

    def set_field(self, name: str, value: Any) -> None:
        if name not in Draft.__dataclass_fields__ or name == "skills":
            raise AttributeError(f"Unknown form field: {name}")
        setattr(self.draft, name, value)

    def toggle_skill(self, skill: str) -> None:
        if skill not in SKILL_OPTIONS:
            raise ValueError(f"Unknown skill: {skill}")
        if skill in self.draft.skills:
            self.draft.skills.remove(skill)
        else:
            self.draft.skills.append(skill)

    def start_edit(self, user: Dict[str, Any]) -> None:
        """Load a stored record into the form; the password starts blank."""
        self.draft = Draft(
            name=user["name"],
            email=user["email"],
            phone=user.get("phone") or "",
            role=user["role"],
            skills=list(user.get("skills") or []),
        )
        self.editing_id = user["id"]

    def cancel_edit(self) -> None:
        self.draft = Draft()
        self.editing_id = None

    def _notify(self, level: str, message: str) -> None:
        self.notifications.append((level, message))

    def _load_users(self) -> bool:
        try:
            self.users = self.api.list_users()
        except CLIENT_ERRORS as exc:
            logger.error("Error fetching users: %s", exc)
            self._notify("error", "Error fetching users")
            return False
        return True

    def refresh(self) -> bool:
        """Re-fetch the full user list."""
        if not self._in_flight.acquire(blocking=False):
            return False
        try:
            return self._load_users()
        finally:
            self._in_flight.release()

    def submit(self) -> bool:
        """Create or update from the draft.

        Returns True when the server accepted the change. A rejected draft is
        left untouched so it can be corrected.
        """
        if not self.is_password_valid:
            self._notify("error", WEAK_PASSWORD)
            return False
        if not self._in_flight.acquire(blocking=False):
            return False
        try:
            payload = self.draft.to_payload()
            try:
                if self.editing_id is not None:
                    self.api.update_user(self.editing_id, payload)
                    self._notify("success", "User updated successfully")
                else:
                    self.api.create_user(payload)
                    self._notify("success", "User registered successfully")
            except CLIENT_ERRORS as exc:
                logger.error("Error saving user: %s", exc)
                self._notify("error", error_message(exc))
                return False

            self.draft = Draft()
            self.editing_id = None
            self._load_users()
            return True
        finally:
            self._in_flight.release()

    def delete(self, user_id: int) -> bool:
        if not self._in_flight.acquire(blocking=False):
            return False
        try:
            try:
                self.api.delete_user(user_id)
            except CLIENT_ERRORS as exc:
                logger.error("Error deleting user: %s", exc)
                self._notify("error", "Failed to delete user")
                return False
            self._notify("success", "User deleted successfully")
            self._load_users()
            return True
        finally:
            self._in_flight.release()
