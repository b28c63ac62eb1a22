"""User model module."""

from __future__ import annotations

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.auth.roles import Role, parse_roles
from marketplace.models.base import AuditMixin, Base


class User(Base, AuditMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Canonical role set stored as a sorted list; boolean views are derived.
    roles: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def role_set(self) -> frozenset[Role]:
        return parse_roles(self.roles)

    def set_roles(self, roles: frozenset[Role] | set[Role]) -> None:
        self.roles = sorted(role.value for role in roles)
