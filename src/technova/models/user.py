import enum

from sqlalchemy import JSON, Column, DateTime, Enum, Integer, String, func

from ..database import Base


class Role(str, enum.Enum):
    """Roles a registered user can hold."""

    USER = "user"
    ADMIN = "admin"
    DEVELOPER = "developer"


class User(Base):
    """SQLAlchemy model for registered users."""

    __tablename__ = "users"
    # ids are never handed out twice, even after the newest row is deleted
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column("password", String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    role = Column(
        Enum(Role, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        default=Role.USER,
        nullable=False,
    )
    skills = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def to_dict(self) -> dict:
        """Public representation, without the password hash."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": Role(self.role).value,
            "skills": list(self.skills or []),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
