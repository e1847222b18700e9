"""
Personal-record derivation for one exercise block.

Everything here is pure: callers hand in a block plus the exercise's
historical max and get back a new block and the AchievedPR (or None).
"""
from __future__ import annotations
from dataclasses import replace

from app.services.domain import AchievedPR, ExerciseBlock, SetEntry


def beats_history(weight: float, historical_max: float, is_first_time: bool) -> bool:
    return weight > 0 and (is_first_time or weight > historical_max)


def session_max(block: ExerciseBlock) -> float:
    return max((s.weight for s in block.sets if s.done and s.weight > 0), default=0)


def is_eligible_on_completion(
    block: ExerciseBlock, entry: SetEntry, historical_max: float, is_first_time: bool
) -> bool:
    """
    Would completing `entry` make it a PR? It has to beat history and be at
    least as heavy as every other completed, PR-eligible set in the block.
    """
    if not beats_history(entry.weight, historical_max, is_first_time):
        return False
    best_other = max(
        (
            s.weight
            for s in block.sets
            if s.set_number != entry.set_number and s.done
            and beats_history(s.weight, historical_max, is_first_time)
        ),
        default=0,
    )
    return entry.weight >= best_other


def recompute_prs(
    block: ExerciseBlock, historical_max: float, is_first_time: bool
) -> tuple[ExerciseBlock, AchievedPR | None]:
    completed = [s for s in block.sets if s.done and s.weight > 0]
    top = session_max(block)

    achieved = None
    if completed and (is_first_time or top > historical_max):
        achieved = AchievedPR(
            exercise_id=block.exercise_id,
            exercise_name=block.exercise.name,
            new_weight=top,
            previous_weight=historical_max,
        )

    sets = []
    for s in block.sets:
        flagged = bool(completed) and s.done and s.weight == top and beats_history(
            s.weight, historical_max, is_first_time
        )
        # losing the flag also ends any pending acknowledgment
        sets.append(replace(s, is_pr=flagged, just_achieved=s.just_achieved and flagged))
    return replace(block, sets=sets), achieved
