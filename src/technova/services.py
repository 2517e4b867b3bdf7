"""Service layer for validating and persisting user records."""

import logging
import re
from typing import Dict, List, NoReturn

from prometheus_client import Counter
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .database import Database
from .exceptions import ConflictError, InternalError, NotFoundError, RecordServiceError
from .models.user import User
from .schemas import UserCreate, UserUpdate
from .security import PasswordHasher


logger = logging.getLogger(__name__)

USER_CREATED_COUNTER = Counter("users_created_total", "Total users registered")
USER_UPDATED_COUNTER = Counter("users_updated_total", "Total user updates applied")
USER_DELETED_COUNTER = Counter("users_deleted_total", "Total users deleted")

EMAIL_TAKEN = "Email already registered"
EMAIL_IN_USE = "Email already in use by another account"

# Constraint names as reported by MySQL (index) and SQLite (column).
EMAIL_CONSTRAINT_MARKERS = ("ix_users_email", "users.email")

# Largest value a BIGINT primary key can hold.
MAX_USER_ID = 2**63 - 1


def _is_email_conflict(exc: IntegrityError) -> bool:
    """Whether an integrity error comes from the unique email constraint."""
    detail = str(exc.orig).lower()
    return any(marker in detail for marker in EMAIL_CONSTRAINT_MARKERS)


def parse_user_id(user_id: int | str) -> int:
    """Return ``user_id`` as a stored id, or raise ``NotFoundError``.

    Ids that are not positive integers in key range can never match a record.
    """
    text = str(user_id)
    if not re.fullmatch(r"[0-9]+", text):
        raise NotFoundError()
    value = int(text)
    if not 1 <= value <= MAX_USER_ID:
        raise NotFoundError()
    return value


def _handle_service_error(
    session: Session, exc: Exception, conflict_message: str = EMAIL_TAKEN
) -> NoReturn:
    """Rollback the transaction and re-raise as a caller-safe service error.

    Storage-level unique violations on the email column are the
    authoritative duplicate signal and surface as conflicts. Everything else
    is logged with its detail and reported as an opaque server error.
    """
    session.rollback()
    if isinstance(exc, RecordServiceError):
        raise exc
    if isinstance(exc, IntegrityError) and _is_email_conflict(exc):
        logger.info("email uniqueness violated at commit")
        raise ConflictError(conflict_message) from exc
    logger.exception("service layer error", exc_info=exc)
    raise InternalError() from exc


class UserService:
    """Create, read, update and delete user records.

    The storage client and password hasher are supplied by the caller so the
    same service runs against a pooled production database or an in-memory
    one in tests.
    """

    def __init__(self, database: Database, hasher: PasswordHasher | None = None):
        self.database = database
        self.hasher = hasher or PasswordHasher()

    def list_users(self) -> List[Dict[str, object]]:
        """Return every user ordered by id, without password hashes."""

        with self.database.session() as session:
            try:
                users = session.query(User).order_by(User.id).all()
                return [user.to_dict() for user in users]
            except Exception as exc:
                _handle_service_error(session, exc)

    def get_user(self, user_id: int | str) -> Dict[str, object]:
        """Return a single user or raise ``NotFoundError``."""

        user_id = parse_user_id(user_id)
        with self.database.session() as session:
            try:
                user = session.get(User, user_id)
                if user is None:
                    raise NotFoundError()
                return user.to_dict()
            except Exception as exc:
                _handle_service_error(session, exc)

    def create_user(self, payload: UserCreate) -> Dict[str, object]:
        """Register a new user with a freshly hashed password.

        Parameters
        ----------
        payload: UserCreate
            Structurally validated request body.

        Returns
        -------
        dict
            The stored record, without its password hash.
        """
        with self.database.session() as session:
            try:
                existing = session.query(User.id).filter(User.email == payload.email).first()
                if existing:
                    raise ConflictError(EMAIL_TAKEN)

                user = User(
                    name=payload.name,
                    email=payload.email,
                    password_hash=self.hasher.hash(payload.password),
                    phone=payload.phone,
                    role=payload.role,
                    skills=list(payload.skills),
                )
                session.add(user)
                session.commit()
                session.refresh(user)
            except Exception as exc:
                _handle_service_error(session, exc, EMAIL_TAKEN)

        USER_CREATED_COUNTER.inc()
        logger.info("created user id=%s role=%s", user.id, user.role.value)
        return user.to_dict()

    def update_user(self, user_id: int | str, payload: UserUpdate) -> Dict[str, str]:
        """Apply an update, re-hashing only when a new password is supplied."""

        user_id = parse_user_id(user_id)
        with self.database.session() as session:
            try:
                user = session.get(User, user_id)
                if user is None:
                    raise NotFoundError()

                taken = (
                    session.query(User.id)
                    .filter(User.email == payload.email, User.id != user_id)
                    .first()
                )
                if taken:
                    raise ConflictError(EMAIL_IN_USE)

                user.name = payload.name
                user.email = payload.email
                user.phone = payload.phone
                user.role = payload.role
                user.skills = list(payload.skills)
                if payload.password:
                    user.password_hash = self.hasher.hash(payload.password)
                session.commit()
            except Exception as exc:
                _handle_service_error(session, exc, EMAIL_IN_USE)

        USER_UPDATED_COUNTER.inc()
        logger.info(
            "updated user id=%s password_changed=%s", user_id, bool(payload.password)
        )
        return {"message": "User updated successfully"}

    def delete_user(self, user_id: int | str) -> Dict[str, str]:
        """Hard-delete a user by id."""

        user_id = parse_user_id(user_id)
        with self.database.session() as session:
            try:
                deleted = session.query(User).filter(User.id == user_id).delete()
                if not deleted:
                    raise NotFoundError()
                session.commit()
            except Exception as exc:
                _handle_service_error(session, exc)

        USER_DELETED_COUNTER.inc()
        logger.info("deleted user id=%s", user_id)
        return {"message": "User deleted successfully"}
