from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, Field, StringConstraints, field_validator

WorkoutNameStr = Annotated[str, StringConstraints(strip_whitespace=True, max_length=120)]
ExerciseId = Annotated[int, Field(ge=1)]

class WorkoutCreate(BaseModel):
    workout_name: WorkoutNameStr
    exercise_ids: list[ExerciseId] = Field(min_length=1)

    @field_validator("workout_name")
    @classmethod
    def name_non_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("workout name cannot be blank")
        return v

    @field_validator("exercise_ids")
    @classmethod
    def no_duplicates(cls, v: list[int]) -> list[int]:
        if len(set(v)) != len(v):
            raise ValueError("an exercise can only appear once in a workout")
        return v

class WorkoutExerciseRead(BaseModel):
    exercise_lib_id: int
    name: str
    exercise_order: int

class WorkoutRead(BaseModel):
    workout_id: int
    workout_name: str
    created_at: datetime | None = None
    exercises: list[WorkoutExerciseRead] = []

    @classmethod
    def from_model(cls, w) -> "WorkoutRead":
        return cls(
            workout_id=w.workout_id,
            workout_name=w.workout_name,
            created_at=w.created_at,
            exercises=[
                WorkoutExerciseRead(
                    exercise_lib_id=we.exercise_lib_id,
                    name=we.exercise.name,
                    exercise_order=we.exercise_order,
                )
                for we in w.exercises
            ],
        )
