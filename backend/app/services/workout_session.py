# app/services/workout_session.py
"""
In-memory state of one workout in progress.

Owns the exercise blocks and keeps every set's PR flags and the per-exercise
AchievedPR records consistent after each mutation. Past performance comes
from the HistorySource handed to the constructor; lookups that fail are
logged and treated as "no history".
"""
from __future__ import annotations
import logging
import re
import time
from typing import Callable, Literal, Optional, Sequence

from app.errors import BlockNotFound, HistoryLookupError, SetNotFound
from app.services.domain import (
    AchievedPR,
    ExerciseBlock,
    ExerciseRef,
    ExerciseStat,
    SetEntry,
    SetHistory,
    blank_sets,
    seeded_sets,
)
from app.services.history import HistorySource
from app.services.pr import is_eligible_on_completion, recompute_prs

log = logging.getLogger(__name__)

SetField = Literal["reps", "weight"]

# ASCII only; \D would let other scripts' digits through
_NON_DIGITS = re.compile(r"[^0-9]")


def parse_numeric(raw: str | None) -> int:
    """Keep the digits, anything else (or nothing) is 0."""
    digits = _NON_DIGITS.sub("", raw or "")
    if not digits:
        return 0
    try:
        return int(digits)
    except ValueError:
        # past the interpreter's int conversion limit
        return 0


class WorkoutSession:
    def __init__(
        self,
        history: HistorySource,
        *,
        routine_id: Optional[int] = None,
        routine_name: Optional[str] = None,
        default_set_count: int = 3,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.history = history
        self.routine_id = routine_id
        self.routine_name = routine_name
        # the "save this routine" toggle starts on for routines that already exist
        self.persist_routine = routine_id is not None
        self.default_set_count = default_set_count
        self.blocks: list[ExerciseBlock] = []
        self.achieved_prs: dict[int, AchievedPR] = {}
        self._clock = clock
        self.started_at = clock()
        self._baseline: list[int] = []
        self._last_performance: dict[int, list[SetHistory]] = {}
        self._stats: dict[int, Optional[ExerciseStat]] = {}

    # ---- loading ---------------------------------------------------------

    def load_session(self, plan: Optional[Sequence[ExerciseRef]] = None) -> list[ExerciseBlock]:
        self.achieved_prs = {}
        if not plan:
            self.blocks = []
            self._baseline = []
            return self.blocks

        self._fetch_last_performance([ref.id for ref in plan])
        self.blocks = [self._new_block(ref) for ref in plan]
        self._baseline = self.exercise_ids
        return self.blocks

    def add_exercise(self, ref: ExerciseRef) -> list[ExerciseBlock]:
        """Toggle: a second add of the same exercise removes it."""
        if self._find_block(ref.id) is not None:
            self.remove_exercise(ref.id)
            return self.blocks
        if ref.id not in self._last_performance:
            self._fetch_last_performance([ref.id])
        self.blocks.append(self._new_block(ref))
        return self.blocks

    def remove_exercise(self, exercise_id: int) -> None:
        idx = self._block_index(exercise_id)
        del self.blocks[idx]
        self.achieved_prs.pop(exercise_id, None)

    # ---- sets ------------------------------------------------------------

    def add_set(self, exercise_id: int) -> SetEntry:
        block = self.blocks[self._block_index(exercise_id)]
        entry = SetEntry(set_number=len(block.sets) + 1)
        block.sets.append(entry)
        return entry

    def remove_set(self, exercise_id: int, set_number: int) -> None:
        idx = self._block_index(exercise_id)
        block = self.blocks[idx]
        self._get_set(block, set_number)
        kept = [s for s in block.sets if s.set_number != set_number]
        for n, s in enumerate(kept, start=1):
            s.set_number = n
        block.sets = kept
        self._recompute(idx)

    def update_set_field(self, exercise_id: int, set_number: int, field: SetField, raw_text: str | None) -> SetEntry:
        if field not in ("reps", "weight"):
            raise ValueError(f"unknown set field: {field}")
        idx = self._block_index(exercise_id)
        entry = self._get_set(self.blocks[idx], set_number)
        setattr(entry, field, parse_numeric(raw_text))
        entry.just_achieved = False
        if field == "weight":
            self._recompute(idx)
        return self._get_set(self.blocks[idx], set_number)

    def toggle_set_done(self, exercise_id: int, set_number: int) -> SetEntry:
        idx = self._block_index(exercise_id)
        block = self.blocks[idx]
        entry = self._get_set(block, set_number)

        if not entry.done:
            historical_max, first_time = self._historical(exercise_id)
            eligible = is_eligible_on_completion(block, entry, historical_max, first_time)
            entry.done = True
            entry.just_achieved = eligible
            if eligible:
                log.info("PR candidate exercise=%s set=%s weight=%s (previous best %s)",
                         exercise_id, set_number, entry.weight, historical_max)
        else:
            entry.done = False
            entry.is_pr = False
            entry.just_achieved = False

        self._recompute(idx)
        return self._get_set(self.blocks[idx], set_number)

    def clear_transient_flag(self, exercise_id: int, set_number: int) -> SetEntry:
        entry = self._get_set(self.blocks[self._block_index(exercise_id)], set_number)
        entry.just_achieved = False
        return entry

    def set_persist_routine(self, persist: bool) -> None:
        self.persist_routine = persist

    # ---- derived ---------------------------------------------------------

    @property
    def exercise_ids(self) -> list[int]:
        return [b.exercise_id for b in self.blocks]

    @property
    def is_modified(self) -> bool:
        return self.exercise_ids != self._baseline

    @property
    def prs(self) -> list[AchievedPR]:
        return [self.achieved_prs[i] for i in self.exercise_ids if i in self.achieved_prs]

    @property
    def total_sets(self) -> int:
        return sum(len(b.sets) for b in self.blocks)

    @property
    def completed_sets(self) -> int:
        return sum(1 for b in self.blocks for s in b.sets if s.done)

    @property
    def total_reps(self) -> int:
        return sum(s.reps for b in self.blocks for s in b.sets if s.done)

    @property
    def total_weight(self) -> float:
        return sum(s.reps * s.weight for b in self.blocks for s in b.sets if s.done)

    @property
    def elapsed_seconds(self) -> int:
        return max(0, int(self._clock() - self.started_at))

    def historical_max(self, exercise_id: int) -> tuple[float, bool]:
        """(max weight ever, is_first_time) for an exercise."""
        return self._historical(exercise_id)

    # ---- internals -------------------------------------------------------

    def _new_block(self, ref: ExerciseRef) -> ExerciseBlock:
        past = self._last_performance.get(ref.id)
        sets = seeded_sets(past) if past else blank_sets(self.default_set_count)
        self._historical(ref.id)  # warm the stats cache while we're loading
        return ExerciseBlock(exercise=ref, sets=sets)

    def _fetch_last_performance(self, exercise_ids: list[int]) -> None:
        try:
            found = self.history.get_last_performance(exercise_ids)
        except HistoryLookupError:
            log.warning("last performance lookup failed for exercises=%s; using blank sets",
                        exercise_ids, exc_info=True)
            return
        for ex_id in exercise_ids:
            self._last_performance[ex_id] = list(found.get(ex_id, []))

    def _historical(self, exercise_id: int) -> tuple[float, bool]:
        if exercise_id not in self._stats:
            try:
                self._stats[exercise_id] = self.history.get_aggregate_stats(exercise_id)
            except HistoryLookupError:
                log.warning("stats lookup failed for exercise=%s; treating as first time",
                            exercise_id, exc_info=True)
                return 0, True
        stat = self._stats[exercise_id]
        if stat is None:
            return 0, True
        return stat.max_weight, False

    def _recompute(self, idx: int) -> None:
        block = self.blocks[idx]
        historical_max, first_time = self._historical(block.exercise_id)
        updated, achieved = recompute_prs(block, historical_max, first_time)
        self.blocks[idx] = updated
        if achieved is None:
            self.achieved_prs.pop(block.exercise_id, None)
        else:
            self.achieved_prs[block.exercise_id] = achieved

    def _find_block(self, exercise_id: int) -> Optional[int]:
        return next((i for i, b in enumerate(self.blocks) if b.exercise_id == exercise_id), None)

    def _block_index(self, exercise_id: int) -> int:
        idx = self._find_block(exercise_id)
        if idx is None:
            raise BlockNotFound(exercise_id)
        return idx

    @staticmethod
    def _get_set(block: ExerciseBlock, set_number: int) -> SetEntry:
        entry = block.find_set(set_number)
        if entry is None:
            raise SetNotFound(block.exercise_id, set_number)
        return entry
