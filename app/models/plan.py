"""
Plan catalog Pydantic models
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from app.models.subscription import PlanType


class PlanCreateRequest(BaseModel):
    title: str
    description: str
    price: float
    durationWeeks: int
    category: str  # e.g. Strength, Cardio, Weight Loss
    isActive: bool = True
    # Workout plans only
    image: Optional[str] = None
    difficulty: Optional[str] = None  # Beginner, Intermediate, Advanced
    equipmentNeeded: Optional[str] = None  # e.g. Dumbbells, Bodyweight, Full Gym


class PlanResponse(BaseModel):
    id: str
    planType: PlanType
    trainer: str
    title: str
    description: str
    price: float
    durationWeeks: int
    category: str
    isActive: bool = True
    image: Optional[str] = None
    difficulty: Optional[str] = None
    equipmentNeeded: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime

    class Config:
        from_attributes = True
