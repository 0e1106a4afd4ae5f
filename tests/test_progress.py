from bson import ObjectId

from conftest import create, workout_payload
from progress import compute_stats, round_half_up


def log_payload(**overrides):
    payload = {
        "workoutName": "Morning run",
        "date": "2024-05-01T07:30:00",
        "duration": 30,
        "caloriesBurned": 200,
    }
    payload.update(overrides)
    return payload


def test_stats_for_single_completed_session(client, alice):
    create(client, "/api/progress", log_payload(completed=True), alice[0])

    response = client.get("/api/progress/stats", headers=alice[0])
    assert response.status_code == 200
    assert response.json()["data"] == {
        "totalWorkouts": 1,
        "totalMinutes": 30,
        "totalCalories": 200,
        "averageCaloriesPerWorkout": 200,
    }


def test_stats_with_no_sessions(client, alice):
    data = client.get("/api/progress/stats", headers=alice[0]).json()["data"]
    assert data == {"totalWorkouts": 0, "totalMinutes": 0, "totalCalories": 0, "averageCaloriesPerWorkout": 0}


def test_stats_ignore_in_progress_and_other_users(client, alice, bob):
    create(client, "/api/progress", log_payload(duration=20, caloriesBurned=100), alice[0])
    create(client, "/api/progress", log_payload(duration=40, caloriesBurned=301), alice[0])
    create(client, "/api/progress", log_payload(duration=90, caloriesBurned=900, completed=False), alice[0])
    create(client, "/api/progress", log_payload(duration=60, caloriesBurned=500), bob[0])

    data = client.get("/api/progress/stats", headers=alice[0]).json()["data"]
    assert data["totalWorkouts"] == 2
    assert data["totalMinutes"] == 60
    assert data["totalCalories"] == 401
    assert data["averageCaloriesPerWorkout"] == 201


def test_create_defaults_and_optional_workout_reference(client, alice):
    created = create(client, "/api/progress", log_payload(), alice[0])
    assert created["completed"] is True
    assert created["workoutId"] is None
    assert created["notes"] == ""
    assert created["userId"] == alice[1]["id"]
    assert created["date"].startswith("2024-05-01")

    workout_id = str(ObjectId())
    linked = create(client, "/api/progress", log_payload(workoutId=workout_id, date="2024-05-02"), alice[0])
    assert linked["workoutId"] == workout_id
    assert linked["date"].startswith("2024-05-02")


def test_create_validation(client, alice):
    for missing in ("workoutName", "date", "duration", "caloriesBurned"):
        payload = log_payload()
        del payload[missing]
        response = client.post("/api/progress", json=payload, headers=alice[0])
        assert response.status_code == 400, missing

    bad_ref = client.post("/api/progress", json=log_payload(workoutId="nope"), headers=alice[0])
    assert bad_ref.status_code == 400
    assert bad_ref.json()["message"] == "Invalid workoutId"

    assert client.post("/api/progress", json=log_payload()).status_code == 401


def test_list_is_own_logs_newest_date_first(client, alice, bob):
    create(client, "/api/progress", log_payload(workoutName="Old", date="2024-01-01"), alice[0])
    create(client, "/api/progress", log_payload(workoutName="New", date="2024-06-01"), alice[0])
    create(client, "/api/progress", log_payload(workoutName="Bob's", date="2024-07-01"), bob[0])

    body = client.get("/api/progress", headers=alice[0]).json()
    assert body["count"] == 2
    assert [log["workoutName"] for log in body["data"]] == ["New", "Old"]


def test_other_users_log_is_forbidden_not_missing(client, alice, bob):
    log = create(client, "/api/progress", log_payload(), alice[0])

    get = client.get(f"/api/progress/{log['id']}", headers=bob[0])
    assert get.status_code == 403
    assert get.json()["message"] == "Not authorized to view this progress log"
    assert client.put(f"/api/progress/{log['id']}", json={"notes": "x"}, headers=bob[0]).status_code == 403
    assert client.delete(f"/api/progress/{log['id']}", headers=bob[0]).status_code == 403

    missing = client.get(f"/api/progress/{ObjectId()}", headers=bob[0])
    assert missing.status_code == 404
    assert missing.json()["message"] == "Progress log not found"


def test_owner_updates_and_deletes_log(client, alice):
    log = create(client, "/api/progress", log_payload(completed=False), alice[0])

    updated = client.put(
        f"/api/progress/{log['id']}", json={"notes": "Felt great", "duration": 35}, headers=alice[0]
    )
    assert updated.status_code == 200
    data = updated.json()["data"]
    assert data["notes"] == "Felt great"
    assert data["duration"] == 35
    assert data["completed"] is False

    assert client.put(f"/api/progress/{log['id']}", json={"duration": None}, headers=alice[0]).status_code == 400

    assert client.delete(f"/api/progress/{log['id']}", headers=alice[0]).status_code == 200
    assert client.get(f"/api/progress/{log['id']}", headers=alice[0]).status_code == 404


def test_completing_a_session_is_a_new_log(client, alice):
    create(client, "/api/progress", log_payload(completed=False), alice[0])
    create(client, "/api/progress", log_payload(completed=True), alice[0])

    assert client.get("/api/progress", headers=alice[0]).json()["count"] == 2
    assert client.get("/api/progress/stats", headers=alice[0]).json()["data"]["totalWorkouts"] == 1


def test_compute_stats_rounds_half_up():
    logs = [
        {"completed": True, "duration": 10, "calories_burned": 2},
        {"completed": True, "duration": 10, "calories_burned": 3},
        {"completed": False, "duration": 99, "calories_burned": 99},
    ]
    assert compute_stats(logs) == {
        "totalWorkouts": 2,
        "totalMinutes": 20,
        "totalCalories": 5,
        "averageCaloriesPerWorkout": 3,
    }
    assert round_half_up(0.5) == 1
    assert round_half_up(1.49) == 1


def test_workout_reference_is_shown_as_the_workout(client, alice, bob, admin):
    own = create(client, "/api/workouts", workout_payload("Alice's routine", description="Full body"), alice[0])
    default = create(client, "/api/default-workouts", workout_payload("Leg day"), admin[0])
    bobs = create(client, "/api/workouts", workout_payload("Bob's routine"), bob[0])

    created = create(client, "/api/progress", log_payload(workoutId=own["id"]), alice[0])
    assert created["workoutId"] == {
        "id": own["id"],
        "name": "Alice's routine",
        "category": "strength",
        "difficulty": "beginner",
        "exercises": [],
        "description": "Full body",
    }

    listed = client.get("/api/progress", headers=alice[0]).json()["data"]
    assert listed[0]["workoutId"]["name"] == "Alice's routine"
    assert client.get(f"/api/progress/{created['id']}", headers=alice[0]).json()["data"]["workoutId"]["id"] == own["id"]

    updated = client.put(f"/api/progress/{created['id']}", json={"workoutId": default["id"]}, headers=alice[0])
    assert updated.json()["data"]["workoutId"]["name"] == "Leg day"

    # another user's workout is not revealed, the id is kept as given
    foreign = create(client, "/api/progress", log_payload(workoutId=bobs["id"]), alice[0])
    assert foreign["workoutId"] == bobs["id"]


def test_whole_numbers_stay_whole(client, alice):
    created = create(client, "/api/progress", log_payload(duration=30, caloriesBurned=200.5), alice[0])
    assert isinstance(created["duration"], int)
    assert created["caloriesBurned"] == 200.5

    stats = client.get("/api/progress/stats", headers=alice[0]).json()["data"]
    assert isinstance(stats["totalMinutes"], int)
    assert stats["totalMinutes"] == 30


def test_dates_go_out_in_utc(client, alice):
    created = create(client, "/api/progress", log_payload(date="2024-05-01"), alice[0])
    assert created["date"] == "2024-05-01T00:00:00+00:00"
    assert created["createdAt"].endswith("+00:00")
