from typing import Annotated
from pydantic import BaseModel, StringConstraints
from datetime import datetime

NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]

class ProfileRead(BaseModel):
    profile_id: str
    email: str | None = None
    username: str | None = None
    created_at: datetime | None = None
    model_config = {"from_attributes": True}

class ProfileUpdate(BaseModel):
    username: NameStr

class ExerciseStatRead(BaseModel):
    exercise_lib_id: int
    exercise_name: str
    total_sets: int
    total_reps: int
    total_volume: float
    max_weight: float
    last_performed: str | None = None
    times_performed: int
    model_config = {"from_attributes": True}

class WorkoutHistoryRead(BaseModel):
    workout_history_id: int
    workout_id: int | None = None
    duration_minutes: int
    completed_at: datetime
    model_config = {"from_attributes": True}

class WorkoutHistoryPage(BaseModel):
    items: list[WorkoutHistoryRead]
    total: int
    limit: int
    offset: int
