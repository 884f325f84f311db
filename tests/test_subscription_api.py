"""
HTTP contract for /api/subscriptions and /api/plans
"""
from datetime import timedelta

from bson import ObjectId

from app.models.subscription import IdentityRole
from app.services.subscription_service import create_subscription, transition_subscription
from app.utils.document_helpers import utc_now


def _iso(value):
    return value.isoformat()


def _create_payload(plan, user_id, trainer_id, end_date, **overrides):
    payload = {
        "planType": plan.planType.value,
        "plan": plan.id,
        "user": user_id,
        "trainer": trainer_id,
        "endDate": _iso(end_date),
        "price": plan.price,
    }
    payload.update(overrides)
    return payload


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["mongodb"] == "connected"


def test_requires_bearer_token(client):
    response = client.get("/api/subscriptions/user")
    assert response.status_code in (401, 403)


def test_create_then_transition_scenario(client, login_as, nutrition_plan, user_id, trainer_id, end_date):
    login_as(trainer_id, IdentityRole.TRAINER)
    response = client.post(
        "/api/subscriptions",
        json=_create_payload(nutrition_plan, user_id, trainer_id, end_date, price=999),
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["status"] == "pending"
    assert data["price"] == 999
    assert data["startDate"] == data["createdAt"]
    subscription_id = data["id"]

    response = client.put(f"/api/subscriptions/{subscription_id}/status", json={"status": "active"})
    assert response.status_code == 200
    assert response.json()["status"] == "active"

    response = client.put(f"/api/subscriptions/{subscription_id}/status", json={"status": "pending"})
    assert response.status_code == 409
    assert response.json()["error"] == "invalid_transition"

    response = client.get(f"/api/subscriptions/{subscription_id}")
    assert response.status_code == 200
    assert response.json()["status"] == "active"


def test_create_validation_errors(client, login_as, workout_plan, nutrition_plan, user_id, trainer_id, end_date):
    login_as(trainer_id, IdentityRole.TRAINER)

    response = client.post(
        "/api/subscriptions",
        json=_create_payload(workout_plan, user_id, trainer_id, end_date, planType="yoga"),
    )
    assert response.status_code == 422
    assert response.json()["field"] == "planType"

    payload = _create_payload(workout_plan, user_id, trainer_id, end_date)
    del payload["endDate"]
    response = client.post("/api/subscriptions", json=payload)
    assert response.status_code == 422
    assert response.json()["field"] == "endDate"

    response = client.post(
        "/api/subscriptions",
        json=_create_payload(nutrition_plan, user_id, trainer_id, end_date, planType="workout"),
    )
    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


def test_create_requires_caller_to_be_trainer(client, login_as, db, workout_plan, user_id, trainer_id, end_date):
    login_as(str(ObjectId()))
    response = client.post(
        "/api/subscriptions",
        json=_create_payload(workout_plan, user_id, trainer_id, end_date),
    )
    assert response.status_code == 403

    # The subscriber can't record a booking on their own terms
    login_as(user_id)
    response = client.post(
        "/api/subscriptions",
        json=_create_payload(workout_plan, user_id, trainer_id, end_date, price=0),
    )
    assert response.status_code == 403
    assert db["subscriptions"].count_documents({}) == 0


def test_only_trainer_can_activate(client, login_as, workout_plan, user_id, trainer_id, end_date):
    subscription = create_subscription("workout", workout_plan.id, user_id, trainer_id, end_date, 49)

    login_as(user_id)
    response = client.put(f"/api/subscriptions/{subscription.id}/status", json={"status": "active"})
    assert response.status_code == 403
    assert client.get(f"/api/subscriptions/{subscription.id}").json()["status"] == "pending"

    login_as(trainer_id, IdentityRole.TRAINER)
    response = client.put(f"/api/subscriptions/{subscription.id}/status", json={"status": "active"})
    assert response.status_code == 200
    assert response.json()["status"] == "active"


def test_user_can_cancel(client, login_as, workout_plan, user_id, trainer_id, end_date):
    subscription = create_subscription("workout", workout_plan.id, user_id, trainer_id, end_date, 49)
    transition_subscription(subscription.id, "active")

    login_as(user_id)
    response = client.put(f"/api/subscriptions/{subscription.id}/status", json={"status": "cancelled"})
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"


def test_get_unknown_subscription(client, login_as, user_id):
    login_as(user_id)
    assert client.get(f"/api/subscriptions/{ObjectId()}").status_code == 404
    response = client.put(f"/api/subscriptions/{ObjectId()}/status", json={"status": "cancelled"})
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_outsider_cannot_read_or_change(client, login_as, workout_plan, user_id, trainer_id, end_date):
    subscription = create_subscription("workout", workout_plan.id, user_id, trainer_id, end_date, 49)
    login_as(str(ObjectId()))
    assert client.get(f"/api/subscriptions/{subscription.id}").status_code == 403
    response = client.put(f"/api/subscriptions/{subscription.id}/status", json={"status": "cancelled"})
    assert response.status_code == 403


def test_subscribe_as_logged_in_user(client, login_as, workout_plan, user_id, trainer_id, end_date):
    login_as(user_id)
    response = client.post(
        "/api/subscriptions/subscribe",
        json={"planType": "workout", "planId": workout_plan.id, "endDate": _iso(end_date)},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["user"] == user_id
    assert data["trainer"] == trainer_id
    assert data["price"] == workout_plan.price


def test_list_endpoints(client, login_as, workout_plan, user_id, trainer_id, end_date):
    first = create_subscription("workout", workout_plan.id, user_id, trainer_id, end_date, 49)
    second = create_subscription("workout", workout_plan.id, str(ObjectId()), trainer_id, end_date, 49)

    login_as(user_id)
    response = client.get("/api/subscriptions/user")
    assert [s["id"] for s in response.json()] == [first.id]
    assert client.get("/api/subscriptions/trainer").status_code == 403
    assert client.get("/api/subscriptions", params={"role": "trainer"}).status_code == 403

    login_as(trainer_id, IdentityRole.TRAINER)
    response = client.get("/api/subscriptions", params={"role": "trainer"})
    assert [s["id"] for s in response.json()] == [second.id, first.id]
    assert client.get("/api/subscriptions/trainer").json() == response.json()


def test_trainer_dashboard_and_expire(client, login_as, workout_plan, user_id, trainer_id):
    start = utc_now() - timedelta(days=40)
    overdue = create_subscription(
        "workout", workout_plan.id, user_id, trainer_id, start + timedelta(days=10), 49, start_date=start
    )
    transition_subscription(overdue.id, "active")

    login_as(trainer_id, IdentityRole.TRAINER)
    dashboard = client.get("/api/subscriptions/trainer/dashboard").json()
    assert dashboard["activeSubscriptions"] == 1
    assert dashboard["monthlyRevenue"] == 49

    response = client.post("/api/subscriptions/expire")
    assert response.status_code == 200
    assert response.json()["expiredCount"] == 1

    dashboard = client.get("/api/subscriptions/trainer/dashboard").json()
    assert dashboard["activeSubscriptions"] == 0
    assert dashboard["totalSubscriptions"] == 1


def test_plan_catalog(client, login_as, trainer_id, user_id):
    login_as(user_id)
    response = client.post(
        "/api/plans/workout",
        json={"title": "HIIT", "description": "Intervals", "price": 20, "durationWeeks": 4, "category": "Cardio"},
    )
    assert response.status_code == 403

    login_as(trainer_id, IdentityRole.TRAINER)
    response = client.post(
        "/api/plans/nutrition",
        json={"title": "Cut", "description": "Deficit plan", "price": 30, "durationWeeks": 6, "category": "Weight Loss"},
    )
    assert response.status_code == 201, response.text
    plan = response.json()
    assert plan["trainer"] == trainer_id
    assert plan["planType"] == "nutrition"

    assert client.get(f"/api/plans/nutrition/{plan['id']}").json()["title"] == "Cut"
    assert client.get(f"/api/plans/workout/{plan['id']}").status_code == 404
    assert [p["id"] for p in client.get("/api/plans/nutrition").json()] == [plan["id"]]
    assert client.get("/api/plans/pilates").status_code == 422
