from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kasir.app.api.deps import get_current_user
from kasir.app.core.cache import DASHBOARD_STATS_VIEW, query_cache
from kasir.app.core.database import get_db
from kasir.app.models.user import User
from kasir.app.services.dashboard import get_dashboard_stats

router = APIRouter()


@router.get("/stats")
def dashboard_stats(
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
) -> dict:
    return query_cache.get_or_load(DASHBOARD_STATS_VIEW, lambda: get_dashboard_stats(db))
