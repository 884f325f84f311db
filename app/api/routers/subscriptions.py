"""
Subscription (booking) API routes
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.auth import get_current_identity, get_current_trainer
from app.models.identity import Identity
from app.models.subscription import (
    ExpireResponse,
    IdentityRole,
    StatusChangeRequest,
    SubscribeRequest,
    SubscriptionCreateRequest,
    SubscriptionResponse,
    SubscriptionStatus,
    TrainerDashboardResponse,
)
from app.services.subscription_service import (
    create_subscription,
    expire_subscriptions,
    get_subscription,
    get_trainer_dashboard,
    list_subscriptions_for,
    subscribe_to_plan,
    transition_subscription,
)
from app.utils.document_helpers import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


def _ensure_party(identity: Identity, subscription: SubscriptionResponse) -> None:
    if identity.id not in (subscription.user, subscription.trainer):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a party to this subscription",
        )


@router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
def create_subscription_endpoint(
    request: SubscriptionCreateRequest,
    identity: Identity = Depends(get_current_identity),
):
    """
    Record a subscription between a user and a trainer.

    Only the trainer may set the terms; users subscribe through /subscribe,
    which takes the price from the plan.
    """
    if identity.id != request.trainer:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the trainer of the subscription can record it",
        )

    subscription = create_subscription(
        plan_type=request.planType,
        plan_id=request.plan,
        user_id=request.user,
        trainer_id=request.trainer,
        end_date=request.endDate,
        price=request.price,
        start_date=request.startDate,
    )
    logger.info(f"✓ Subscription {subscription.id} created by {identity.id}")
    return subscription


@router.post("/subscribe", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
def subscribe_endpoint(
    request: SubscribeRequest,
    identity: Identity = Depends(get_current_identity),
):
    """Subscribe the logged-in user to a catalog plan"""
    logger.info(f"Subscribe request from {identity.id}: {request.planType} plan {request.planId}")
    return subscribe_to_plan(
        user_id=identity.id,
        plan_type=request.planType,
        plan_id=request.planId,
        end_date=request.endDate,
        start_date=request.startDate,
    )


@router.get("", response_model=List[SubscriptionResponse])
def list_subscriptions_endpoint(
    role: IdentityRole = Query(IdentityRole.USER),
    identity: Identity = Depends(get_current_identity),
):
    """
    List the caller's subscriptions, most recent first

    Args:
        role: Match the caller against the "user" or the "trainer" field
    """
    if role == IdentityRole.TRAINER and not identity.is_trainer:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Trainer role required")
    return list_subscriptions_for(identity.id, role)


@router.get("/user", response_model=List[SubscriptionResponse])
def list_user_subscriptions(identity: Identity = Depends(get_current_identity)):
    """List subscriptions of the logged-in user"""
    return list_subscriptions_for(identity.id, IdentityRole.USER)


@router.get("/trainer", response_model=List[SubscriptionResponse])
def list_trainer_subscriptions(identity: Identity = Depends(get_current_trainer)):
    """List subscriptions of the logged-in trainer"""
    return list_subscriptions_for(identity.id, IdentityRole.TRAINER)


@router.get("/trainer/dashboard", response_model=TrainerDashboardResponse)
def trainer_dashboard(identity: Identity = Depends(get_current_trainer)):
    """Trainer dashboard totals"""
    return get_trainer_dashboard(identity.id)


@router.post("/expire", response_model=ExpireResponse)
def expire_endpoint(identity: Identity = Depends(get_current_trainer)):
    """Cancel every pending or active subscription past its endDate"""
    checked_at = utc_now()
    expired = expire_subscriptions(checked_at)
    logger.info(f"Expiry run by {identity.id}: {expired} subscription(s) cancelled")
    return ExpireResponse(expiredCount=expired, checkedAt=checked_at)


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
def get_subscription_endpoint(
    subscription_id: str,
    identity: Identity = Depends(get_current_identity),
):
    """Get a subscription by ID"""
    subscription = get_subscription(subscription_id)
    _ensure_party(identity, subscription)
    return subscription


@router.put("/{subscription_id}/status", response_model=SubscriptionResponse)
def change_subscription_status(
    subscription_id: str,
    request: StatusChangeRequest,
    identity: Identity = Depends(get_current_identity),
):
    """
    Change subscription status

    Allowed: pending -> active, pending -> cancelled, active -> cancelled.
    Either party may cancel; only the trainer may confirm (activate).
    """
    subscription = get_subscription(subscription_id)
    _ensure_party(identity, subscription)
    if request.status == SubscriptionStatus.ACTIVE.value and identity.id != subscription.trainer:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the trainer can activate a subscription",
        )
    logger.info(f"Status change request for subscription {subscription_id} by {identity.id}: {request.status}")
    return transition_subscription(subscription_id, request.status)
