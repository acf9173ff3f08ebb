from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from kasir.app.models.user import CASHIER_ROLES, User


def list_cashiers(db: Session) -> list[User]:
    """Active staff who may be recorded as the cashier on a sale."""
    return (
        db.query(User)
        .filter(User.role.in_(CASHIER_ROLES), User.is_active.is_(True))
        .order_by(User.full_name)
        .all()
    )


def resolve_cashier(db: Session, cashier_id: UUID | None, fallback: User) -> User:
    """Return the selected cashier, or *fallback* (the logged-in user)."""
    if cashier_id is None or cashier_id == fallback.id:
        return fallback
    cashier = (
        db.query(User)
        .filter(
            User.id == cashier_id,
            User.role.in_(CASHIER_ROLES),
            User.is_active.is_(True),
        )
        .first()
    )
    if not cashier:
        raise ValueError("Selected cashier not found")
    return cashier
