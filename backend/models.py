from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel


class Category(str, Enum):
    STRENGTH = "strength"
    CARDIO = "cardio"
    FLEXIBILITY = "flexibility"
    SPORTS = "sports"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2)]
Password = Annotated[str, StringConstraints(min_length=8)]
Goals = Annotated[str, StringConstraints(max_length=500)]
Minutes = Annotated[Union[int, float], Field(ge=0)]
Calories = Annotated[Union[int, float], Field(ge=0)]
Count = Annotated[int, Field(ge=1)]


def _not_null(value):
    if value is None:
        raise ValueError("may not be null")
    return value


def _normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


class ApiModel(BaseModel):
    # Wire format is camelCase; storage keys are the snake_case field names.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


# ------------------------- USERS -------------------------


class UserRegister(ApiModel):
    name: PersonName
    email: EmailStr
    password: Password
    goals: Goals = ""

    normalize_email = field_validator("email", mode="before")(_normalize_email)


class UserLogin(ApiModel):
    email: EmailStr
    password: str

    normalize_email = field_validator("email", mode="before")(_normalize_email)


class ProfileUpdate(ApiModel):
    name: Optional[PersonName] = None
    email: Optional[EmailStr] = None
    goals: Optional[Goals] = None
    password: Optional[Password] = None

    normalize_email = field_validator("email", mode="before")(_normalize_email)
    reject_nulls = field_validator("name", "email", "goals", "password")(_not_null)


# ------------------------- EXERCISES -------------------------


class ExerciseCreate(ApiModel):
    name: Name
    category: Category
    difficulty: Difficulty
    description: str = ""
    target_muscles: List[str] = []
    equipment: List[str] = []
    instructions: List[str] = []
    sets: Optional[Count] = None
    reps: Optional[Count] = None
    duration: Optional[Minutes] = None
    calories_burned: Calories = 0


class ExerciseUpdate(ApiModel):
    name: Optional[Name] = None
    category: Optional[Category] = None
    difficulty: Optional[Difficulty] = None
    description: Optional[str] = None
    target_muscles: Optional[List[str]] = None
    equipment: Optional[List[str]] = None
    instructions: Optional[List[str]] = None
    sets: Optional[Count] = None
    reps: Optional[Count] = None
    duration: Optional[Minutes] = None
    calories_burned: Optional[Calories] = None

    reject_nulls = field_validator(
        "name", "category", "difficulty", "description",
        "target_muscles", "equipment", "instructions", "calories_burned",
    )(_not_null)


# ------------------------- WORKOUTS -------------------------


class WorkoutFields(ApiModel):
    name: Name
    description: str = ""
    duration: Minutes
    calories_burned: Calories = 0
    exercises: List[str] = []
    instructions: List[str] = []


class WorkoutCreate(WorkoutFields):
    """Workout logged by a user; category and difficulty may be left out."""

    category: Category = Category.STRENGTH.value
    difficulty: Difficulty = Difficulty.INTERMEDIATE.value

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, value):
        return value or Category.STRENGTH.value

    @field_validator("difficulty", mode="before")
    @classmethod
    def default_difficulty(cls, value):
        return value or Difficulty.INTERMEDIATE.value


class DefaultWorkoutCreate(WorkoutFields):
    category: Category
    difficulty: Difficulty


class WorkoutUpdate(ApiModel):
    name: Optional[Name] = None
    category: Optional[Category] = None
    difficulty: Optional[Difficulty] = None
    description: Optional[str] = None
    duration: Optional[Minutes] = None
    calories_burned: Optional[Calories] = None
    exercises: Optional[List[str]] = None
    instructions: Optional[List[str]] = None

    reject_nulls = field_validator(
        "name", "category", "difficulty", "description", "duration",
        "calories_burned", "exercises", "instructions",
    )(_not_null)


# ------------------------- PROGRESS -------------------------


def _parse_date(value):
    # Date-only strings ("2024-05-01") are taken as midnight UTC.
    if isinstance(value, str) and len(value) == 10:
        return f"{value}T00:00:00"
    return value


def _as_utc(value):
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _blank_to_none(value):
    return value or None


class ProgressLogCreate(ApiModel):
    workout_id: Optional[str] = None
    workout_name: Name
    date: datetime
    duration: Minutes
    calories_burned: Calories
    notes: str = ""
    completed: bool = True

    parse_date = field_validator("date", mode="before")(_parse_date)
    date_as_utc = field_validator("date")(_as_utc)
    blank_workout_id = field_validator("workout_id", mode="before")(_blank_to_none)


class ProgressLogUpdate(ApiModel):
    workout_id: Optional[str] = None
    workout_name: Optional[Name] = None
    date: Optional[datetime] = None
    duration: Optional[Minutes] = None
    calories_burned: Optional[Calories] = None
    notes: Optional[str] = None
    completed: Optional[bool] = None

    parse_date = field_validator("date", mode="before")(_parse_date)
    date_as_utc = field_validator("date")(_as_utc)
    blank_workout_id = field_validator("workout_id", mode="before")(_blank_to_none)
    reject_nulls = field_validator(
        "workout_name", "date", "duration", "calories_burned", "notes", "completed",
    )(_not_null)
