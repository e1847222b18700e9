# app/services/completion.py
"""
Finishing a workout.

    idle -> checking-completeness -> blocked-incomplete
                                  -> blocked-missing-values
                                  -> routine-save-decision / routine-name-decision
                                  -> saving -> done | failed

Blocked and decision states are returned to the caller with nothing written.
Saving is a strictly ordered series of commits (routine, routine exercises,
history header, per-set rows); an error part way leaves earlier rows in place
and the in-memory session untouched so the whole finish can be retried.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from app.errors import PersistenceError
from app.repositories.history_repo import HistoryRepository
from app.repositories.workout_repo import WorkoutRepository
from app.services.workout_session import WorkoutSession

log = logging.getLogger(__name__)


class CompletionState(str, Enum):
    idle = "idle"
    checking = "checking-completeness"
    blocked_incomplete = "blocked-incomplete"
    blocked_missing_values = "blocked-missing-values"
    routine_save_decision = "routine-save-decision"
    routine_name_decision = "routine-name-decision"
    saving = "saving"
    done = "done"
    failed = "failed"


class RoutineAction(str, Enum):
    update = "update"
    save_new = "save_new"
    discard = "discard"


MESSAGES = {
    CompletionState.blocked_incomplete: "Please complete all sets before finishing your workout.",
    CompletionState.blocked_missing_values: "Please enter reps and weight for every completed set.",
    CompletionState.routine_save_decision: "You changed this workout. Update it, save it as a new workout, or discard the changes?",
    CompletionState.routine_name_decision: "Give this workout a name to save it, or discard it.",
    CompletionState.failed: "Failed to save workout. Please try again.",
}


@dataclass(slots=True)
class CompletionSummary:
    workout_history_id: int
    workout_name: str
    duration: int           # seconds
    exercises: int
    sets: int               # completed sets
    total_reps: int
    weight_lifted: float
    prs: list[dict] = field(default_factory=list)


@dataclass(slots=True)
class FinishResult:
    state: CompletionState
    message: Optional[str] = None
    options: list[RoutineAction] = field(default_factory=list)
    summary: Optional[CompletionSummary] = None

    @property
    def blocked(self) -> bool:
        return self.state not in (CompletionState.done, CompletionState.failed)


def default_workout_name(when: datetime) -> str:
    return f"{when:%b} {when.day}, {when.year} Workout"


def check_completeness(session: WorkoutSession) -> Optional[CompletionState]:
    """The blocking state, or None when every set can be saved."""
    all_sets = [s for b in session.blocks for s in b.sets]
    if any(not s.done for s in all_sets):
        return CompletionState.blocked_incomplete
    if any(s.missing_values for s in all_sets):
        return CompletionState.blocked_missing_values
    return None


class WorkoutCompletion:
    def __init__(
        self,
        workouts: WorkoutRepository,
        history: HistoryRepository,
        *,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.workouts = workouts
        self.history = history
        self.now = now
        self.state = CompletionState.idle

    def _move(self, state: CompletionState) -> CompletionState:
        log.debug("completion %s -> %s", self.state.value, state.value)
        self.state = state
        return state

    def _stop(self, state: CompletionState, options: list[RoutineAction] | None = None,
              message: str | None = None) -> FinishResult:
        self._move(state)
        return FinishResult(state=state, message=message or MESSAGES.get(state), options=options or [])

    def routine_options(self, session: WorkoutSession) -> tuple[Optional[CompletionState], list[RoutineAction]]:
        if not session.persist_routine or not session.blocks:
            return None, []
        if session.routine_id is not None:
            if not session.is_modified:
                return None, []
            return CompletionState.routine_save_decision, [
                RoutineAction.update, RoutineAction.save_new, RoutineAction.discard,
            ]
        return CompletionState.routine_name_decision, [RoutineAction.save_new, RoutineAction.discard]

    def finish(
        self,
        session: WorkoutSession,
        profile_id: str,
        *,
        action: Optional[RoutineAction] = None,
        routine_name: Optional[str] = None,
    ) -> FinishResult:
        self._move(CompletionState.checking)
        blocked = check_completeness(session)
        if blocked is not None:
            return self._stop(blocked)

        decision, options = self.routine_options(session)
        name = (routine_name or "").strip()
        if decision is not None:
            if action not in options:
                return self._stop(decision, options)
            if action is RoutineAction.save_new and not name:
                return self._stop(decision, options, "A name is required to save a new workout.")
        else:
            action = None

        self._move(CompletionState.saving)
        try:
            summary = self._save(session, profile_id, action, name)
        except PersistenceError:
            log.warning("finishing workout failed for profile=%s; session kept for retry", profile_id)
            return self._stop(CompletionState.failed)

        self._move(CompletionState.done)
        log.info("workout saved profile=%s history=%s sets=%s prs=%s",
                 profile_id, summary.workout_history_id, summary.sets, len(summary.prs))
        return FinishResult(state=CompletionState.done, summary=summary)

    def _save(
        self,
        session: WorkoutSession,
        profile_id: str,
        action: Optional[RoutineAction],
        name: str,
    ) -> CompletionSummary:
        completed_at = self.now()
        workout_name = session.routine_name
        workout_id = session.routine_id if session.persist_routine else None

        if action is RoutineAction.update:
            self.workouts.replace_exercises(session.routine_id, session.exercise_ids)
        elif action is RoutineAction.save_new:
            routine = self.workouts.create_with_exercises(
                profile_id, workout_name=name, exercise_ids=session.exercise_ids
            )
            workout_id = routine.workout_id
            workout_name = routine.workout_name

        header = self.history.create(
            profile_id,
            workout_id=workout_id,
            duration_minutes=session.elapsed_seconds // 60,
            completed_at=completed_at,
        )
        # completeness check guarantees every set here is done
        rows = [
            {"exercise_id": b.exercise_id, "set_number": s.set_number, "reps": s.reps, "weight": s.weight}
            for b in session.blocks
            for s in b.sets
        ]
        self.history.add_sets(profile_id, header.workout_history_id, rows)

        return CompletionSummary(
            workout_history_id=header.workout_history_id,
            workout_name=workout_name or default_workout_name(completed_at),
            duration=session.elapsed_seconds,
            exercises=len(session.blocks),
            sets=session.completed_sets,
            total_reps=session.total_reps,
            weight_lifted=session.total_weight,
            prs=[pr.as_dict() for pr in session.prs],
        )
