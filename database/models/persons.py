"""
Person Models

Accounts of customers, performers and administrators.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Boolean,
    DateTime,
    func,
    JSON,
    UniqueConstraint,
)
from database.engine import Base, utc_now
from core.security import INHOUSE_REALM
from datetime import datetime
from typing import Any


# ==================== Person Model ===================== #
class Person(Base):
    """
    A registered account.

    Logins are unique per realm. In the in-house realm the access token is
    a generated identifier handed out on signup and login.
    """

    __tablename__ = "persons"
    __table_args__ = (
        UniqueConstraint("realm", "login", name="uq_persons_realm_login"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    realm: Mapped[str] = mapped_column(
        String(50), nullable=False, default=INHOUSE_REALM
    )
    login: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    ethereum_address: Mapped[str] = mapped_column(
        String(42), nullable=False, default=""
    )
    resources: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    access_token: Mapped[str | None] = mapped_column(String(64), unique=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    def __repr__(self):
        return f"<Person(id={self.id}, login={self.login})>"
