import pytest

import cli
from client import (
    AuthContext,
    ClientError,
    FitnessClient,
    Session,
    SessionStore,
    can_modify,
    is_owner,
    render_catalog,
    render_entry,
    render_stats,
)
from conftest import PASSWORD, create, exercise_payload, register


@pytest.fixture
def store(tmp_path):
    return SessionStore(str(tmp_path / "session.json"))


@pytest.fixture
def auth(client, store):
    return AuthContext(FitnessClient("http://testserver/api", Session(), http=client), store)


def test_session_store_round_trip(store):
    assert store.load() is None
    store.save("abc")
    assert store.load() == "abc"
    store.clear()
    assert store.load() is None


def test_session_store_ignores_corrupt_file(store):
    store.path.write_text("{not json", encoding="utf-8")
    assert store.load() is None


def test_login_persists_token_and_restore_reuses_it(client, store, auth, alice):
    user = auth.login("alice@example.com", PASSWORD)
    assert user["name"] == "Alice"
    assert auth.is_authenticated and not auth.is_admin
    assert store.load() == auth.session.token

    fresh = AuthContext(FitnessClient("http://testserver/api", Session(), http=client), store)
    assert fresh.restore()["email"] == "alice@example.com"
    assert fresh.is_authenticated


def test_restore_drops_rejected_token(store, auth):
    store.save("stale-token")
    assert auth.restore() is None
    assert store.load() is None
    assert not auth.is_authenticated


def test_register_does_not_sign_in(auth):
    user = auth.register("Frank", "frank@example.com", PASSWORD)
    assert user["email"] == "frank@example.com"
    assert not auth.is_authenticated


def test_api_errors_surface_as_client_errors(auth, alice):
    with pytest.raises(ClientError) as exc:
        auth.login("alice@example.com", "wrong-password")
    assert exc.value.status == 401
    assert exc.value.message == "Invalid email or password"

    with pytest.raises(ClientError) as exc:
        auth.client.create_exercise(exercise_payload("Push-up"))
    assert exc.value.status == 401


def test_password_change_forces_logout(auth, store, alice):
    auth.login("alice@example.com", PASSWORD)
    assert auth.update_profile(goals="Stay flexible")["goals"] == "Stay flexible"
    assert auth.is_authenticated

    assert auth.update_profile(password="another-pass-9") is None
    assert not auth.is_authenticated
    assert store.load() is None


def test_client_covers_catalog_and_progress(client, auth, admin, alice):
    create(client, "/api/default-exercises", exercise_payload("Squat"), admin[0])
    auth.login("alice@example.com", PASSWORD)
    api = auth.client

    own = api.create_exercise(exercise_payload("Push-up"))
    workout = api.create_workout({"name": "Quick", "duration": 10, "exercises": [own["id"]]})
    assert [e["name"] for e in api.get_workout(workout["id"])["exercises"]] == ["Push-up"]
    assert [e["name"] for e in api.list_exercises()] == ["Squat", "Push-up"]
    assert [e["name"] for e in api.list_default_exercises()] == ["Squat"]

    api.log_progress({"workoutName": "Quick", "date": "2024-05-01", "duration": 10, "caloriesBurned": 80})
    assert api.stats()["totalCalories"] == 80
    assert len(api.list_progress()) == 1

    api.delete_workout(workout["id"])
    assert api.list_workouts() == []


def test_view_affordances():
    owner = {"id": "u1", "role": "user"}
    stranger = {"id": "u2", "role": "user"}
    admin_user = {"id": "a1", "role": "admin"}
    own = {"id": "e1", "name": "Push-up", "category": "strength", "difficulty": "beginner",
           "createdBy": "u1", "isDefault": False}
    default = {"id": "e2", "name": "Squat", "category": "strength", "difficulty": "advanced",
               "createdBy": "a1", "isDefault": True}

    assert is_owner(own, owner) and not is_owner(own, stranger)
    assert not is_owner(default, admin_user)
    assert can_modify(own, owner) and not can_modify(own, admin_user)
    assert can_modify(default, admin_user) and not can_modify(default, owner)
    assert not can_modify(own, None)

    assert render_entry(own, owner) == "e1  Push-up | strength/beginner (editable)"
    assert render_entry(default, owner) == "e2  Squat | strength/advanced [default]"
    assert render_catalog([], owner) == ["(nothing here yet)"]

    workout = {"id": "w1", "name": "Legs", "category": "strength", "difficulty": "beginner",
               "duration": 30.0, "exercises": [default], "isDefault": True}
    assert render_entry(workout, admin_user) == "w1  Legs | strength/beginner | 30 min | 1 exercises [default] (editable)"

    lines = render_stats({"totalWorkouts": 2, "totalMinutes": 60.0, "totalCalories": 401.0,
                          "averageCaloriesPerWorkout": 201})
    assert lines[0] == "Workouts completed: 2"
    assert lines[3].endswith("201")


def test_cli_commands(client, store, auth, alice, capsys):
    assert cli.main(["login", "alice@example.com", "--password", PASSWORD], auth=auth) == 0
    assert "Welcome back, Alice!" in capsys.readouterr().out

    assert cli.main(["log", "Evening walk", "--duration", "45", "--calories", "150"], auth=auth) == 0
    assert "Logged Evening walk" in capsys.readouterr().out

    assert cli.main(["stats"], auth=auth) == 0
    out = capsys.readouterr().out
    assert "Workouts completed: 1" in out
    assert "Avg calories/workout: 150" in out

    assert cli.main(["whoami"], auth=auth) == 0
    assert "alice@example.com" in capsys.readouterr().out

    assert cli.main(["logout"], auth=auth) == 0
    assert cli.main(["stats"], auth=auth) == 1
    assert "No token provided" in capsys.readouterr().err
