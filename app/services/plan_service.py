"""
Plan service - workout and nutrition plan catalog
"""
import logging
import math
from typing import List, Optional

from app.core.exceptions import NotFoundError, ValidationError
from app.models.plan import PlanCreateRequest, PlanResponse
from app.models.subscription import PlanType
from app.utils.document_helpers import (
    PLAN_COLLECTIONS,
    parse_object_id,
    parse_plan_type,
    plan_doc_to_response,
    require_collection,
    utc_now,
)

logger = logging.getLogger(__name__)


def get_plan_collection(plan_type: PlanType):
    """Collection holding plans of the given type"""
    return require_collection(PLAN_COLLECTIONS[plan_type])


def create_plan(plan_type, trainer_id: str, plan_data: PlanCreateRequest) -> PlanResponse:
    """
    Add a plan to the catalog on behalf of a trainer

    Args:
        plan_type: "workout" or "nutrition"
        trainer_id: Identity of the authoring trainer
        plan_data: Plan fields

    Returns:
        PlanResponse for the stored plan
    """
    plan_type = parse_plan_type(plan_type)

    trainer_obj = parse_object_id(trainer_id)
    if trainer_obj is None:
        raise ValidationError("Invalid trainer ID format", field="trainer")
    if not math.isfinite(plan_data.price) or plan_data.price < 0:
        raise ValidationError("price must be a finite, non-negative number", field="price")
    if plan_data.durationWeeks <= 0:
        raise ValidationError("durationWeeks must be positive", field="durationWeeks")

    now = utc_now()
    plan_doc = {
        "trainer": trainer_obj,
        "title": plan_data.title,
        "description": plan_data.description,
        "price": plan_data.price,
        "durationWeeks": plan_data.durationWeeks,
        "category": plan_data.category,
        "isActive": plan_data.isActive,
        "createdAt": now,
        "updatedAt": now,
    }
    if plan_type == PlanType.WORKOUT:
        plan_doc.update({
            "image": plan_data.image,
            "difficulty": plan_data.difficulty,
            "equipmentNeeded": plan_data.equipmentNeeded,
        })

    collection = get_plan_collection(plan_type)
    result = collection.insert_one(plan_doc)
    plan_doc["_id"] = result.inserted_id
    logger.info(f"{plan_type.value} plan created: '{plan_data.title}' (ID: {result.inserted_id}) by trainer {trainer_id}")
    return plan_doc_to_response(plan_doc, plan_type)


def find_plan_doc(plan_type: PlanType, plan_id) -> Optional[dict]:
    """Raw plan document from the collection selected by plan_type, or None"""
    plan_obj = parse_object_id(plan_id)
    if plan_obj is None:
        return None
    return get_plan_collection(plan_type).find_one({"_id": plan_obj})


def get_plan(plan_type, plan_id: str) -> PlanResponse:
    """Get a plan by type and ID"""
    plan_type = parse_plan_type(plan_type)
    plan_doc = find_plan_doc(plan_type, plan_id)
    if plan_doc is None:
        raise NotFoundError(f"{plan_type.value.capitalize()} plan", plan_id)
    return plan_doc_to_response(plan_doc, plan_type)


def list_plans(plan_type, trainer_id: Optional[str] = None, active_only: bool = True) -> List[PlanResponse]:
    """
    List catalog plans of one type, newest first

    Args:
        plan_type: "workout" or "nutrition"
        trainer_id: Restrict to plans authored by this trainer
        active_only: Skip plans that are no longer offered
    """
    plan_type = parse_plan_type(plan_type)

    query = {}
    if trainer_id is not None:
        trainer_obj = parse_object_id(trainer_id)
        if trainer_obj is None:
            raise ValidationError("Invalid trainer ID format", field="trainer")
        query["trainer"] = trainer_obj
    if active_only:
        query["isActive"] = True

    cursor = get_plan_collection(plan_type).find(query).sort([("createdAt", -1), ("_id", -1)])
    return [plan_doc_to_response(doc, plan_type) for doc in cursor]


def count_trainer_plans(trainer_id: str) -> int:
    """Number of plans of any type authored by a trainer"""
    trainer_obj = parse_object_id(trainer_id)
    if trainer_obj is None:
        return 0
    return sum(
        get_plan_collection(plan_type).count_documents({"trainer": trainer_obj})
        for plan_type in PlanType
    )
