"""
Subscription-related Pydantic models
"""
from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class PlanType(str, Enum):
    """Discriminator selecting which plan collection a subscription points at"""
    WORKOUT = "workout"
    NUTRITION = "nutrition"


class SubscriptionStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    CANCELLED = "cancelled"


class IdentityRole(str, Enum):
    USER = "user"
    TRAINER = "trainer"


class SubscriptionCreateRequest(BaseModel):
    """
    Request to record a subscription.

    Fields are optional at the schema level so that missing values are reported
    by the ledger as a ValidationError rather than a request parsing error.
    """
    planType: Optional[str] = None
    plan: Optional[str] = None
    user: Optional[str] = None
    trainer: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    price: Optional[float] = None


class SubscribeRequest(BaseModel):
    """Request from the logged-in user to subscribe to a catalog plan"""
    planType: Optional[str] = None
    planId: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None


class StatusChangeRequest(BaseModel):
    """Request to move a subscription to another status"""
    status: str


class SubscriptionResponse(BaseModel):
    """Subscription record"""
    id: str
    planType: PlanType
    plan: str
    user: str
    trainer: str
    startDate: datetime
    endDate: datetime
    status: SubscriptionStatus = SubscriptionStatus.PENDING
    price: float
    createdAt: datetime
    updatedAt: datetime

    class Config:
        from_attributes = True


class TrainerDashboardResponse(BaseModel):
    totalPlans: int = 0
    totalSubscriptions: int = 0
    pendingSubscriptions: int = 0
    activeSubscriptions: int = 0
    monthlyRevenue: float = 0.0


class ExpireResponse(BaseModel):
    expiredCount: int
    checkedAt: datetime
