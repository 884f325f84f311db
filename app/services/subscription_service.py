"""
Subscription service - booking ledger for trainer plan subscriptions

A subscription moves through pending -> active -> cancelled, or pending ->
cancelled directly. Cancelled is terminal and records are never deleted.
"""

import logging
import math
from numbers import Real
from typing import Dict, FrozenSet, List, Optional
from datetime import datetime

from pymongo import ReturnDocument

from app.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from app.db.mongodb import SUBSCRIPTIONS_COLLECTION
from app.models.subscription import (
    IdentityRole,
    SubscriptionResponse,
    SubscriptionStatus,
    TrainerDashboardResponse,
)
from app.services.plan_service import count_trainer_plans, find_plan_doc
from app.utils.document_helpers import (
    parse_object_id,
    parse_plan_type,
    require_collection,
    subscription_doc_to_response,
    to_utc_naive,
    utc_now,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[SubscriptionStatus, FrozenSet[SubscriptionStatus]] = {
    SubscriptionStatus.PENDING: frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED}),
    SubscriptionStatus.ACTIVE: frozenset({SubscriptionStatus.CANCELLED}),
    SubscriptionStatus.CANCELLED: frozenset(),
}

# Statuses that lapse to cancelled once endDate has passed
EXPIRABLE_STATUSES = [
    status.value for status, targets in ALLOWED_TRANSITIONS.items()
    if SubscriptionStatus.CANCELLED in targets
]


def get_subscriptions_collection():
    return require_collection(SUBSCRIPTIONS_COLLECTION)


def allowed_sources(target: SubscriptionStatus) -> List[str]:
    """Statuses from which target can be reached"""
    return [source.value for source, targets in ALLOWED_TRANSITIONS.items() if target in targets]


def _require_object_id(value, field: str):
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    object_id = parse_object_id(value)
    if object_id is None:
        raise ValidationError(f"Invalid {field} ID format", field=field)
    return object_id


def _parse_status(value) -> SubscriptionStatus:
    try:
        return SubscriptionStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in SubscriptionStatus)
        raise ValidationError(
            f"Invalid subscription status '{value}'. Expected one of: {allowed}", field="status"
        )


def create_subscription(
    plan_type,
    plan_id,
    user_id,
    trainer_id,
    end_date: Optional[datetime],
    price,
    start_date: Optional[datetime] = None,
) -> SubscriptionResponse:
    """
    Record a new subscription in the pending state

    Args:
        plan_type: "workout" or "nutrition"; selects the plan collection
        plan_id: Plan ID, which must exist in the collection for plan_type
        user_id: Subscribing identity
        trainer_id: Owning trainer identity
        end_date: End of the subscribed period
        price: Amount paid, non-negative
        start_date: Start of the period (defaults to now)

    Returns:
        SubscriptionResponse for the stored record

    Raises:
        ValidationError: Missing or invalid field; nothing is written
    """
    plan_type = parse_plan_type(plan_type)
    plan_obj = _require_object_id(plan_id, "plan")
    user_obj = _require_object_id(user_id, "user")
    trainer_obj = _require_object_id(trainer_id, "trainer")

    if user_obj == trainer_obj:
        raise ValidationError("user and trainer must be different identities", field="trainer")

    if end_date is None:
        raise ValidationError("endDate is required", field="endDate")

    if price is None:
        raise ValidationError("price is required", field="price")
    if isinstance(price, bool) or not isinstance(price, Real):
        raise ValidationError("price must be a number", field="price")
    if not math.isfinite(price) or price < 0:
        raise ValidationError("price must be a finite, non-negative number", field="price")

    now = utc_now()
    start_date = to_utc_naive(start_date) or now
    end_date = to_utc_naive(end_date)
    if end_date <= start_date:
        raise ValidationError("endDate must be after startDate", field="endDate")

    if find_plan_doc(plan_type, plan_obj) is None:
        raise ValidationError(
            f"plan {plan_id} is not a {plan_type.value} plan", field="plan"
        )

    subscription_doc = {
        "planType": plan_type.value,
        "plan": plan_obj,
        "user": user_obj,
        "trainer": trainer_obj,
        "startDate": start_date,
        "endDate": end_date,
        "status": SubscriptionStatus.PENDING.value,
        "price": price,
        "createdAt": now,
        "updatedAt": now,
    }

    collection = get_subscriptions_collection()
    result = collection.insert_one(subscription_doc)
    subscription_doc["_id"] = result.inserted_id
    logger.info(
        f"Subscription created: {result.inserted_id} ({plan_type.value} plan {plan_id}, "
        f"user {user_id}, trainer {trainer_id}, price {price})"
    )
    return subscription_doc_to_response(subscription_doc)


def subscribe_to_plan(
    user_id: str,
    plan_type,
    plan_id: Optional[str],
    end_date: Optional[datetime],
    start_date: Optional[datetime] = None,
) -> SubscriptionResponse:
    """
    Subscribe a user to a catalog plan; trainer and price come from the plan

    Raises:
        ValidationError: Unknown plan type, or plan missing or no longer offered
    """
    plan_type = parse_plan_type(plan_type)
    plan_doc = find_plan_doc(plan_type, plan_id) if plan_id else None
    if plan_doc is None or not plan_doc.get("isActive", True):
        raise ValidationError(f"{plan_type.value} plan is not available", field="planId")

    return create_subscription(
        plan_type=plan_type,
        plan_id=plan_doc["_id"],
        user_id=user_id,
        trainer_id=plan_doc["trainer"],
        end_date=end_date,
        price=plan_doc.get("price"),
        start_date=start_date,
    )


def get_subscription(subscription_id: str) -> SubscriptionResponse:
    """
    Get a subscription by ID

    Raises:
        NotFoundError: No subscription with this ID
    """
    subscription_obj = parse_object_id(subscription_id)
    if subscription_obj is None:
        raise NotFoundError("Subscription", str(subscription_id))

    doc = get_subscriptions_collection().find_one({"_id": subscription_obj})
    if doc is None:
        raise NotFoundError("Subscription", str(subscription_id))
    return subscription_doc_to_response(doc)


def transition_subscription(subscription_id: str, target_status) -> SubscriptionResponse:
    """
    Move a subscription to target_status if the state machine allows it

    The status check and the write happen in one conditional update, so two
    concurrent requests cannot both move the record out of the same state.

    Raises:
        ValidationError: target_status is not a known status
        NotFoundError: No subscription with this ID
        InvalidTransitionError: Transition not allowed; record unchanged
    """
    target = _parse_status(target_status)

    subscription_obj = parse_object_id(subscription_id)
    if subscription_obj is None:
        raise NotFoundError("Subscription", str(subscription_id))

    collection = get_subscriptions_collection()
    updated = collection.find_one_and_update(
        {"_id": subscription_obj, "status": {"$in": allowed_sources(target)}},
        {"$set": {"status": target.value, "updatedAt": utc_now()}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is not None:
        logger.info(f"Subscription {subscription_id} moved to {target.value}")
        return subscription_doc_to_response(updated)

    current = collection.find_one({"_id": subscription_obj}, {"status": 1})
    if current is None:
        raise NotFoundError("Subscription", str(subscription_id))

    current_status = current.get("status", SubscriptionStatus.PENDING.value)
    logger.warning(
        f"Rejected transition for subscription {subscription_id}: {current_status} -> {target.value}"
    )
    raise InvalidTransitionError(current_status, target.value)


def list_subscriptions_for(identity: str, role) -> List[SubscriptionResponse]:
    """
    List subscriptions where identity is the user or the trainer, newest first

    Args:
        identity: User or trainer ID
        role: "user" or "trainer"; selects which field is matched
    """
    try:
        role = IdentityRole(role)
    except ValueError:
        raise ValidationError(f"Invalid role '{role}'. Expected 'user' or 'trainer'", field="role")

    identity_obj = parse_object_id(identity)
    if identity_obj is None:
        # An id that can't exist owns no subscriptions
        return []

    cursor = (
        get_subscriptions_collection()
        .find({role.value: identity_obj})
        .sort([("createdAt", -1), ("_id", -1)])
    )
    return [subscription_doc_to_response(doc) for doc in cursor]


def _expiry_query(now: datetime) -> dict:
    return {"status": {"$in": EXPIRABLE_STATUSES}, "endDate": {"$lt": now}}


def find_expirable_subscriptions(now: Optional[datetime] = None) -> List[SubscriptionResponse]:
    """Pending or active subscriptions whose endDate is before now, oldest end first"""
    now = to_utc_naive(now) or utc_now()
    cursor = get_subscriptions_collection().find(_expiry_query(now)).sort("endDate", 1)
    return [subscription_doc_to_response(doc) for doc in cursor]


def expire_subscriptions(now: Optional[datetime] = None) -> int:
    """
    Cancel every pending or active subscription whose endDate has passed

    Args:
        now: Reference time compared against endDate (defaults to current UTC time).
            updatedAt always records the actual write time.

    Returns:
        Number of subscriptions cancelled
    """
    now = to_utc_naive(now) or utc_now()
    result = get_subscriptions_collection().update_many(
        _expiry_query(now),
        {"$set": {"status": SubscriptionStatus.CANCELLED.value, "updatedAt": utc_now()}},
    )
    if result.modified_count:
        logger.info(f"Expired {result.modified_count} subscription(s) with endDate before {now.isoformat()}")
    else:
        logger.debug("No subscriptions to expire")
    return result.modified_count


def get_trainer_dashboard(trainer_id: str) -> TrainerDashboardResponse:
    """
    Summary counts for a trainer's catalog and bookings

    monthlyRevenue is the sum of prices of the trainer's active subscriptions.
    """
    trainer_obj = parse_object_id(trainer_id)
    if trainer_obj is None:
        return TrainerDashboardResponse()

    pipeline = [
        {"$match": {"trainer": trainer_obj}},
        {"$group": {"_id": "$status", "count": {"$sum": 1}, "revenue": {"$sum": "$price"}}},
    ]
    by_status = {
        row["_id"]: row for row in get_subscriptions_collection().aggregate(pipeline)
    }

    def count(status: SubscriptionStatus) -> int:
        return by_status.get(status.value, {}).get("count", 0)

    return TrainerDashboardResponse(
        totalPlans=count_trainer_plans(trainer_id),
        totalSubscriptions=sum(row["count"] for row in by_status.values()),
        pendingSubscriptions=count(SubscriptionStatus.PENDING),
        activeSubscriptions=count(SubscriptionStatus.ACTIVE),
        monthlyRevenue=by_status.get(SubscriptionStatus.ACTIVE.value, {}).get("revenue", 0),
    )
