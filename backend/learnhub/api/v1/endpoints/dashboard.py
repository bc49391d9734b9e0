"""Dashboard trend endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from learnhub.core.dependencies import Caller
from learnhub.db.session import get_db
from learnhub.gamification.service import compute_dashboard_trends
from learnhub.schemas.trends import DashboardTrendsRequest, TrendDeltaResponse, TrendsResponse

router = APIRouter()


@router.post("/trends", response_model=TrendsResponse)
def dashboard_trends(request: DashboardTrendsRequest, caller: Caller, db: Session = Depends(get_db)):
    """
    Trend deltas against the caller's previous dashboard view.

    The submitted metrics become the new baseline. While another worker is
    updating the same baseline every trend is null.
    """
    trends = compute_dashboard_trends(db, caller.tenant_id, caller.user_id, request.metrics)
    return TrendsResponse(
        trends={
            name: TrendDeltaResponse(percent_change=t.percent_change, label=t.label) if t else None
            for name, t in trends.items()
        }
    )
