"""Python client for the Workout Buddy REST API.

Session state is explicit: a ``Session`` is handed to ``FitnessClient`` at
construction and only ``AuthContext`` changes it. The bearer token is kept in
a small JSON file (``SessionStore``) between runs.
"""
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests


DEFAULT_API_URL = os.getenv("FITNESS_API_URL", "http://localhost:5000/api")
DEFAULT_SESSION_FILE = os.getenv("FITNESS_SESSION_FILE", "~/.fitness_session.json")
TOKEN_KEY = "auth_token"


class ClientError(Exception):
    """A non-2xx answer from the API, carrying its message."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class SessionStore:
    def __init__(self, path: str = DEFAULT_SESSION_FILE) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError:
            return None
        return data.get(TOKEN_KEY) if isinstance(data, dict) else None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({TOKEN_KEY: token}, f)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


@dataclass
class Session:
    token: Optional[str] = None
    user: Optional[dict] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user) and self.user.get("role") == "admin"


class FitnessClient:
    """Thin wrapper over the REST endpoints; returns the envelope's data."""

    def __init__(self, base_url: str = DEFAULT_API_URL, session: Optional[Session] = None, http=None) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else Session()
        self.http = http if http is not None else requests.Session()

    def _request(self, method: str, path: str, payload: Optional[dict] = None, auth: bool = True) -> dict:
        headers = {"Content-Type": "application/json"}
        if auth and self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        resp = self.http.request(method, f"{self.base_url}{path}", json=payload, headers=headers)
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if resp.status_code >= 400:
            raise ClientError(resp.status_code, body.get("message") or f"HTTP {resp.status_code}")
        return body

    def _data(self, method: str, path: str, payload: Optional[dict] = None, auth: bool = True):
        return self._request(method, path, payload, auth).get("data")

    def health(self) -> dict:
        return self._request("GET", "/health", auth=False)

    # auth
    def register(self, name: str, email: str, password: str, goals: str = "") -> dict:
        payload = {"name": name, "email": email, "password": password, "goals": goals}
        return self._data("POST", "/auth/register", payload, auth=False)

    def login(self, email: str, password: str) -> dict:
        return self._data("POST", "/auth/login", {"email": email, "password": password}, auth=False)

    def me(self) -> dict:
        return self._data("GET", "/auth/me")

    def update_profile(self, changes: dict) -> dict:
        return self._data("PUT", "/auth/profile", changes)

    # exercises
    def list_exercises(self) -> list:
        return self._data("GET", "/exercises")

    def get_exercise(self, exercise_id: str) -> dict:
        return self._data("GET", f"/exercises/{exercise_id}", auth=False)

    def create_exercise(self, exercise: dict) -> dict:
        return self._data("POST", "/exercises", exercise)

    def update_exercise(self, exercise_id: str, changes: dict) -> dict:
        return self._data("PUT", f"/exercises/{exercise_id}", changes)

    def delete_exercise(self, exercise_id: str) -> None:
        self._request("DELETE", f"/exercises/{exercise_id}")

    def list_default_exercises(self) -> list:
        return self._data("GET", "/default-exercises")

    def create_default_exercise(self, exercise: dict) -> dict:
        return self._data("POST", "/default-exercises", exercise)

    def update_default_exercise(self, exercise_id: str, changes: dict) -> dict:
        return self._data("PUT", f"/default-exercises/{exercise_id}", changes)

    def delete_default_exercise(self, exercise_id: str) -> None:
        self._request("DELETE", f"/default-exercises/{exercise_id}")

    # workouts
    def list_workouts(self) -> list:
        return self._data("GET", "/workouts")

    def get_workout(self, workout_id: str) -> dict:
        return self._data("GET", f"/workouts/{workout_id}", auth=False)

    def create_workout(self, workout: dict) -> dict:
        return self._data("POST", "/workouts", workout)

    def update_workout(self, workout_id: str, changes: dict) -> dict:
        return self._data("PUT", f"/workouts/{workout_id}", changes)

    def delete_workout(self, workout_id: str) -> None:
        self._request("DELETE", f"/workouts/{workout_id}")

    def list_default_workouts(self) -> list:
        return self._data("GET", "/default-workouts")

    def create_default_workout(self, workout: dict) -> dict:
        return self._data("POST", "/default-workouts", workout)

    def update_default_workout(self, workout_id: str, changes: dict) -> dict:
        return self._data("PUT", f"/default-workouts/{workout_id}", changes)

    def delete_default_workout(self, workout_id: str) -> None:
        self._request("DELETE", f"/default-workouts/{workout_id}")

    # progress
    def list_progress(self) -> list:
        return self._data("GET", "/progress")

    def get_progress(self, log_id: str) -> dict:
        return self._data("GET", f"/progress/{log_id}")

    def log_progress(self, log: dict) -> dict:
        return self._data("POST", "/progress", log)

    def update_progress(self, log_id: str, changes: dict) -> dict:
        return self._data("PUT", f"/progress/{log_id}", changes)

    def delete_progress(self, log_id: str) -> None:
        self._request("DELETE", f"/progress/{log_id}")

    def stats(self) -> dict:
        return self._data("GET", "/progress/stats")


class AuthContext:
    """Owns the session: the only place that logs in, out, or restores."""

    def __init__(self, client: FitnessClient, store: SessionStore) -> None:
        self.client = client
        self.store = store

    @property
    def session(self) -> Session:
        return self.client.session

    @property
    def user(self) -> Optional[dict]:
        return self.session.user

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def is_admin(self) -> bool:
        return self.session.is_admin

    def restore(self) -> Optional[dict]:
        """Pick up a persisted token; a token the server rejects is dropped."""
        token = self.store.load()
        if not token:
            return None
        self.session.token = token
        try:
            self.session.user = self.client.me()["user"]
        except ClientError:
            self.logout()
            return None
        return self.session.user

    def login(self, email: str, password: str) -> dict:
        data = self.client.login(email, password)
        if not data or not data.get("user") or not data.get("token"):
            raise ClientError(500, "Invalid response from server - user data missing")
        self.store.save(data["token"])
        self.session.token = data["token"]
        self.session.user = data["user"]
        return data["user"]

    def register(self, name: str, email: str, password: str, goals: str = "") -> dict:
        # Registering does not sign in; the user logs in afterwards.
        return self.client.register(name, email, password, goals)["user"]

    def logout(self) -> None:
        self.store.clear()
        self.session.token = None
        self.session.user = None

    def update_profile(self, **changes) -> Optional[dict]:
        data = self.client.update_profile(changes)
        if data.get("passwordChanged"):
            self.logout()
            return None
        self.session.user = data["user"]
        return self.session.user


# ------------------------- view helpers -------------------------


def _ref_id(value) -> Optional[str]:
    if not value:
        return None
    if isinstance(value, dict):
        return str(value.get("id") or value.get("_id") or "") or None
    return str(value)


def is_owner(entry: dict, user: Optional[dict]) -> bool:
    if entry.get("isDefault") or not user:
        return False
    owner = _ref_id(entry.get("createdBy"))
    return owner is not None and owner == _ref_id(user.get("id"))


def can_modify(entry: dict, user: Optional[dict]) -> bool:
    if entry.get("isDefault"):
        return bool(user) and user.get("role") == "admin"
    return is_owner(entry, user)


def render_entry(entry: dict, user: Optional[dict] = None) -> str:
    parts = [entry.get("name", "?"), f"{entry.get('category', '-')}/{entry.get('difficulty', '-')}"]
    if entry.get("duration") is not None:
        parts.append(f"{entry['duration']:g} min")
    if isinstance(entry.get("exercises"), list):
        parts.append(f"{len(entry['exercises'])} exercises")
    line = " | ".join(parts)
    if entry.get("isDefault"):
        line += " [default]"
    if can_modify(entry, user):
        line += " (editable)"
    return f"{entry.get('id', '')}  {line}"


def render_catalog(entries: list, user: Optional[dict] = None) -> list:
    if not entries:
        return ["(nothing here yet)"]
    return [render_entry(entry, user) for entry in entries]


def render_stats(stats: dict) -> list:
    return [
        f"Workouts completed: {stats.get('totalWorkouts', 0)}",
        f"Total minutes:      {stats.get('totalMinutes', 0):g}",
        f"Total calories:     {stats.get('totalCalories', 0):g}",
        f"Avg calories/workout: {stats.get('averageCaloriesPerWorkout', 0)}",
    ]
