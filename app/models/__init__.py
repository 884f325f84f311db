"""Pydantic models for request/response validation"""

# Import all models for easy access
from app.models.subscription import (
    PlanType,
    SubscriptionStatus,
    IdentityRole,
    SubscriptionCreateRequest,
    SubscribeRequest,
    StatusChangeRequest,
    SubscriptionResponse,
    TrainerDashboardResponse,
    ExpireResponse,
)

from app.models.plan import (
    PlanCreateRequest,
    PlanResponse,
)

from app.models.identity import Identity

__all__ = [
    # Subscription models
    "PlanType",
    "SubscriptionStatus",
    "IdentityRole",
    "SubscriptionCreateRequest",
    "SubscribeRequest",
    "StatusChangeRequest",
    "SubscriptionResponse",
    "TrainerDashboardResponse",
    "ExpireResponse",
    # Plan models
    "PlanCreateRequest",
    "PlanResponse",
    # Identity
    "Identity",
]
