"""
Helpers shared by the ledger and plan catalog services
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException, status

from app.core.exceptions import ValidationError
from app.db.mongodb import (
    get_collection,
    is_connected,
    WORKOUT_PLANS_COLLECTION,
    NUTRITION_PLANS_COLLECTION,
)
from app.models.subscription import PlanType, SubscriptionResponse
from app.models.plan import PlanResponse

logger = logging.getLogger(__name__)

PLAN_COLLECTIONS = {
    PlanType.WORKOUT: WORKOUT_PLANS_COLLECTION,
    PlanType.NUTRITION: NUTRITION_PLANS_COLLECTION,
}


def utc_now() -> datetime:
    """
    Current UTC time as a naive datetime truncated to milliseconds,
    matching what BSON stores and returns.
    """
    now = datetime.utcnow()
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an incoming datetime to naive UTC at millisecond precision"""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def parse_object_id(value) -> Optional[ObjectId]:
    """Return value as an ObjectId, or None if it is not a valid id"""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def parse_plan_type(value) -> PlanType:
    """Resolve a planType value, raising ValidationError outside {workout, nutrition}"""
    if value is None:
        raise ValidationError("planType is required", field="planType")
    try:
        return PlanType(value)
    except ValueError:
        allowed = ", ".join(p.value for p in PlanType)
        raise ValidationError(
            f"Invalid plan type '{value}'. Expected one of: {allowed}", field="planType"
        )


def require_collection(collection_name: str):
    """
    Get a collection or fail the request with 503 when the database is unreachable
    """
    if not is_connected():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection unavailable",
        )

    collection = get_collection(collection_name)
    if collection is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to access {collection_name} collection",
        )
    return collection


def subscription_doc_to_response(doc: dict) -> SubscriptionResponse:
    """
    Convert MongoDB subscription document to SubscriptionResponse

    Args:
        doc: MongoDB subscription document

    Returns:
        SubscriptionResponse object
    """
    return SubscriptionResponse(
        id=str(doc["_id"]),
        planType=doc["planType"],
        plan=str(doc["plan"]),
        user=str(doc["user"]),
        trainer=str(doc["trainer"]),
        startDate=doc["startDate"],
        endDate=doc["endDate"],
        status=doc.get("status", "pending"),
        price=doc["price"],
        createdAt=doc["createdAt"],
        updatedAt=doc["updatedAt"],
    )


def plan_doc_to_response(doc: dict, plan_type: PlanType) -> PlanResponse:
    """Convert MongoDB plan document to PlanResponse"""
    return PlanResponse(
        id=str(doc["_id"]),
        planType=plan_type,
        trainer=str(doc["trainer"]),
        title=doc.get("title", ""),
        description=doc.get("description", ""),
        price=doc.get("price", 0),
        durationWeeks=doc.get("durationWeeks", 0),
        category=doc.get("category", ""),
        isActive=doc.get("isActive", True),
        image=doc.get("image"),
        difficulty=doc.get("difficulty"),
        equipmentNeeded=doc.get("equipmentNeeded"),
        createdAt=doc["createdAt"],
        updatedAt=doc["updatedAt"],
    )
