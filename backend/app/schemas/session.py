from typing import Annotated, Literal
from pydantic import BaseModel, Field, StringConstraints, field_validator

from app.services.completion import RoutineAction

PositiveId = Annotated[int, Field(ge=1)]
RoutineNameStr = Annotated[str, StringConstraints(strip_whitespace=True, max_length=120)]
RawNumberStr = Annotated[str, StringConstraints(max_length=32)]

class SessionStart(BaseModel):
    # a saved routine, or an ad-hoc selection, or neither for an empty workout
    workout_id: PositiveId | None = None
    exercise_ids: list[PositiveId] | None = None
    workout_name: RoutineNameStr | None = None

    @field_validator("exercise_ids")
    @classmethod
    def no_duplicates(cls, v: list[int] | None) -> list[int] | None:
        if v and len(set(v)) != len(v):
            raise ValueError("an exercise can only appear once in a workout")
        return v

class SetEntryRead(BaseModel):
    set_number: int
    reps: int
    weight: float
    done: bool
    is_pr: bool
    just_achieved: bool
    previous_reps: int | None = None
    previous_weight: float | None = None
    model_config = {"from_attributes": True}

class ExerciseRefRead(BaseModel):
    id: int
    name: str
    category: str | None = None
    equipment: str | None = None
    model_config = {"from_attributes": True}

class ExerciseBlockRead(BaseModel):
    exercise: ExerciseRefRead
    sets: list[SetEntryRead]
    model_config = {"from_attributes": True}

class AchievedPRRead(BaseModel):
    exercise_id: int
    exercise_name: str
    new_weight: float
    previous_weight: float
    model_config = {"from_attributes": True}

class SessionRead(BaseModel):
    session_id: str
    workout_id: int | None = None
    workout_name: str | None = None
    persist_routine: bool
    is_modified: bool
    elapsed_seconds: int
    total_sets: int
    completed_sets: int
    total_reps: int
    total_weight: float
    blocks: list[ExerciseBlockRead]
    prs: list[AchievedPRRead]

class SetFieldUpdate(BaseModel):
    field: Literal["reps", "weight"]
    # raw text from the input box; non-digits are dropped server side
    value: RawNumberStr | None = None

class PersistRoutineUpdate(BaseModel):
    persist: bool

class FinishRequest(BaseModel):
    action: RoutineAction | None = None
    routine_name: RoutineNameStr | None = None

class CompletionSummaryRead(BaseModel):
    workout_history_id: int
    workout_name: str
    duration: int
    exercises: int
    sets: int
    total_reps: int
    weight_lifted: float
    prs: list[AchievedPRRead]
    model_config = {"from_attributes": True}
