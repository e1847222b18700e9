# app/services/domain.py
from __future__ import annotations
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ExerciseRef:
    id: int
    name: str
    category: str | None = None
    equipment: str | None = None


@dataclass(frozen=True, slots=True)
class SetHistory:
    set_number: int
    reps: int
    weight: float


@dataclass(frozen=True, slots=True)
class ExerciseStat:
    exercise_lib_id: int
    exercise_name: str
    total_sets: int = 0
    total_reps: int = 0
    total_volume: float = 0
    max_weight: float = 0
    last_performed: str | None = None
    times_performed: int = 0


@dataclass(slots=True)
class SetEntry:
    set_number: int
    reps: int = 0
    weight: float = 0
    done: bool = False
    is_pr: bool = False
    just_achieved: bool = False
    # placeholder hints carried over from the last session, never saved as-is
    previous_reps: int | None = None
    previous_weight: float | None = None

    @property
    def missing_values(self) -> bool:
        """0 only counts as a real value when there is a previous value behind it."""
        return (self.reps == 0 and self.previous_reps is None) or (
            self.weight == 0 and self.previous_weight is None
        )


@dataclass(slots=True)
class ExerciseBlock:
    exercise: ExerciseRef
    sets: list[SetEntry] = field(default_factory=list)

    @property
    def exercise_id(self) -> int:
        return self.exercise.id

    def find_set(self, set_number: int) -> SetEntry | None:
        return next((s for s in self.sets if s.set_number == set_number), None)


@dataclass(frozen=True, slots=True)
class AchievedPR:
    exercise_id: int
    exercise_name: str
    new_weight: float
    previous_weight: float

    def as_dict(self) -> dict:
        return {
            "exercise_id": self.exercise_id,
            "exercise_name": self.exercise_name,
            "new_weight": self.new_weight,
            "previous_weight": self.previous_weight,
        }


def blank_sets(count: int) -> list[SetEntry]:
    return [SetEntry(set_number=i) for i in range(1, count + 1)]


def seeded_sets(history: list[SetHistory]) -> list[SetEntry]:
    """One blank set per historical set, numbered densely in history order."""
    ordered = sorted(history, key=lambda h: h.set_number)
    return [
        SetEntry(set_number=i, previous_reps=h.reps, previous_weight=h.weight)
        for i, h in enumerate(ordered, start=1)
    ]
