"""Password strength rules shared by the API and the registration console."""

import re
from dataclasses import astuple, dataclass
from typing import List

SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
MIN_LENGTH = 8

_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_NUMBER = re.compile(r"[0-9]")
_SPECIAL = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")

MESSAGES = (
    f"Password must be at least {MIN_LENGTH} characters",
    "Password must contain at least one uppercase letter",
    "Password must contain at least one lowercase letter",
    "Password must contain at least one number",
    "Password must contain at least one special character",
)


@dataclass(frozen=True)
class PasswordChecks:
    """Outcome of each policy predicate for one candidate password."""

    min_length: bool = False
    has_uppercase: bool = False
    has_lowercase: bool = False
    has_number: bool = False
    has_special: bool = False

    @property
    def passed(self) -> bool:
        return all(astuple(self))

    def failed_messages(self) -> List[str]:
        """Messages for the failing predicates, in rule order."""
        return [msg for ok, msg in zip(astuple(self), MESSAGES) if not ok]


def check_password(password: str) -> PasswordChecks:
    """Evaluate every predicate independently.

    Parameters
    ----------
    password: str
        Candidate plaintext password. ``None`` is treated as empty.

    Returns
    -------
    PasswordChecks
        One boolean per rule; no rule short-circuits another.
    """
    password = password or ""
    return PasswordChecks(
        min_length=len(password) >= MIN_LENGTH,
        has_uppercase=bool(_UPPERCASE.search(password)),
        has_lowercase=bool(_LOWERCASE.search(password)),
        has_number=bool(_NUMBER.search(password)),
        has_special=bool(_SPECIAL.search(password)),
    )


def is_password_valid(password: str, editing: bool = False) -> bool:
    """Return whether a password may be submitted.

    An empty password while editing an existing record means "keep the
    current one" and is always accepted.
    """
    if editing and not password:
        return True
    return check_password(password).passed
