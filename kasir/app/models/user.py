from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from kasir.app.core.database import Base


class RoleEnum(str, enum.Enum):
    ADMIN = "ADMIN"
    CASHIER = "CASHIER"
    STOCKIST = "STOCKIST"
    VIEWER = "VIEWER"


# Roles that may be assigned as the cashier of record on a sale
CASHIER_ROLES: tuple[RoleEnum, ...] = (
    RoleEnum.CASHIER,
    RoleEnum.ADMIN,
    RoleEnum.STOCKIST,
)


class User(Base):
    """Staff profile and login identity."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[RoleEnum] = mapped_column(Enum(RoleEnum), nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (Index("ix_users_role", "role"),)
