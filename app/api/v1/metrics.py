# ================================
# METRICS API ROUTES (api/v1/metrics.py)
# ================================

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.dependencies import get_db, get_admin_profile, get_agent_profile, get_customer_profile
from app.models.profile import Profile
from app.services.metrics_service import MetricsService, AdminMetrics, AgentMetrics, CustomerMetrics

router = APIRouter()

@router.get("/admin", response_model=AdminMetrics)
async def admin_metrics(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_admin_profile)
):
    return MetricsService.admin_metrics(db)

@router.get("/agent", response_model=AgentMetrics)
async def agent_metrics(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_agent_profile)
):
    return MetricsService.agent_metrics(db, current_profile)

@router.get("/customer", response_model=CustomerMetrics)
async def customer_metrics(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_customer_profile)
):
    return MetricsService.customer_metrics(db, current_profile)
