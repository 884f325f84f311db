"""
Plan catalog API routes
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, status

from app.core.auth import get_current_identity, get_current_trainer
from app.models.identity import Identity
from app.models.plan import PlanCreateRequest, PlanResponse
from app.services.plan_service import create_plan, get_plan, list_plans

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/plans", tags=["plans"])


@router.post("/{plan_type}", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
def add_plan(
    plan_type: str,
    plan_data: PlanCreateRequest,
    identity: Identity = Depends(get_current_trainer),
):
    """Add a workout or nutrition plan authored by the logged-in trainer"""
    plan = create_plan(plan_type, identity.id, plan_data)
    logger.info(f"✓ Plan added: {plan.title} (ID: {plan.id})")
    return plan


@router.get("/{plan_type}", response_model=List[PlanResponse])
def list_plans_endpoint(
    plan_type: str,
    trainer: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
):
    """List plans on offer, optionally for a single trainer"""
    return list_plans(plan_type, trainer_id=trainer)


@router.get("/{plan_type}/{plan_id}", response_model=PlanResponse)
def get_plan_endpoint(
    plan_type: str,
    plan_id: str,
    identity: Identity = Depends(get_current_identity),
):
    """Get a plan by ID"""
    return get_plan(plan_type, plan_id)
