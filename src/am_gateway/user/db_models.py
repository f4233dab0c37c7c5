"""Read-only ORM mapping of `users` (DDL: alembic/versions/001_create_users.py).

Accounts are provisioned by the identity service. This service only needs
to know that a token's subject exists, is active, and whether it may use
the admin endpoints, so only those columns are mapped.
"""

import uuid

from sqlalchemy import Boolean, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.am_common.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    username: Mapped[str] = mapped_column(String(64))
    is_active: Mapped[bool] = mapped_column(Boolean)
    is_admin: Mapped[bool] = mapped_column(Boolean)

    def __repr__(self) -> str:
        return f"UserModel(id={self.id}, username={self.username!r}, admin={self.is_admin})"
