"""
Shared fixtures: an in-memory MongoDB (mongomock) bound to app.db.mongodb
"""
from datetime import timedelta

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.db import mongodb
from app.core.auth import get_current_identity
from app.main import app
from app.models.identity import Identity
from app.models.plan import PlanCreateRequest
from app.models.subscription import IdentityRole
from app.services.plan_service import create_plan
from app.utils.document_helpers import utc_now


@pytest.fixture
def db():
    client = mongomock.MongoClient()
    mongodb.use_database(client, "fitpulse_test")
    yield mongodb.get_database()
    mongodb.mongodb_client = None
    mongodb.mongodb_db = None


@pytest.fixture
def trainer_id():
    return str(ObjectId())


@pytest.fixture
def user_id():
    return str(ObjectId())


@pytest.fixture
def workout_plan(db, trainer_id):
    return create_plan(
        "workout",
        trainer_id,
        PlanCreateRequest(
            title="8-Week Strength",
            description="Progressive overload with compound lifts",
            price=49.0,
            durationWeeks=8,
            category="Strength",
            difficulty="Intermediate",
            equipmentNeeded="Full Gym",
        ),
    )


@pytest.fixture
def nutrition_plan(db, trainer_id):
    return create_plan(
        "nutrition",
        trainer_id,
        PlanCreateRequest(
            title="Lean Bulk",
            description="High protein meal plan",
            price=999.0,
            durationWeeks=4,
            category="Muscle Gain",
        ),
    )


@pytest.fixture
def end_date():
    return utc_now() + timedelta(days=30)


@pytest.fixture
def client(db):
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login_as():
    """Override the bearer-token dependency with a fixed identity"""
    def _login(identity_id: str, role: IdentityRole = IdentityRole.USER) -> Identity:
        identity = Identity(id=identity_id, role=role)
        app.dependency_overrides[get_current_identity] = lambda: identity
        return identity
    return _login
