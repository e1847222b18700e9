# app/repositories/history_repo.py
from __future__ import annotations
import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import select, func, distinct
from sqlalchemy.exc import SQLAlchemyError

from app.errors import PersistenceError
from app.models import ExerciseHistory, ExerciseLibrary, WorkoutHistory
from app.repositories.base import BaseRepository, Page
from app.services.domain import ExerciseStat, SetHistory

log = logging.getLogger(__name__)

class HistoryRepository(BaseRepository[WorkoutHistory]):
    model = WorkoutHistory

    # READS
    def last_performance(self, profile_id: str, exercise_ids: Iterable[int]) -> dict[int, list[SetHistory]]:
        """Sets from the most recent session that included each exercise."""
        ids = list(exercise_ids)
        if not ids:
            return {}
        stmt = (
            select(ExerciseHistory)
            .join(WorkoutHistory, WorkoutHistory.workout_history_id == ExerciseHistory.workout_history_id)
            .where(ExerciseHistory.profile_id == profile_id, ExerciseHistory.exercise_id.in_(ids))
            .order_by(
                ExerciseHistory.exercise_id,
                WorkoutHistory.completed_at.desc(),
                WorkoutHistory.workout_history_id.desc(),
                ExerciseHistory.set_number.asc(),
            )
        )
        latest: dict[int, int] = {}
        out: dict[int, list[SetHistory]] = {}
        for row in self.db.execute(stmt).scalars():
            session_id = latest.setdefault(row.exercise_id, row.workout_history_id)
            if row.workout_history_id != session_id:
                continue
            out.setdefault(row.exercise_id, []).append(
                SetHistory(set_number=row.set_number, reps=row.reps, weight=float(row.weight or 0))
            )
        return out

    def exercise_stats(self, profile_id: str, *, exercise_id: Optional[int] = None) -> list[ExerciseStat]:
        stmt = (
            select(
                ExerciseHistory.exercise_id,
                ExerciseLibrary.name,
                func.count(ExerciseHistory.exercise_history_id),
                func.coalesce(func.sum(ExerciseHistory.reps), 0),
                func.coalesce(func.sum(ExerciseHistory.reps * ExerciseHistory.weight), 0),
                func.coalesce(func.max(ExerciseHistory.weight), 0),
                func.max(WorkoutHistory.completed_at),
                func.count(distinct(ExerciseHistory.workout_history_id)),
            )
            .join(ExerciseLibrary, ExerciseLibrary.exercise_lib_id == ExerciseHistory.exercise_id)
            .join(WorkoutHistory, WorkoutHistory.workout_history_id == ExerciseHistory.workout_history_id)
            .where(ExerciseHistory.profile_id == profile_id)
            .group_by(ExerciseHistory.exercise_id, ExerciseLibrary.name)
            .order_by(ExerciseLibrary.name.asc())
        )
        if exercise_id is not None:
            stmt = stmt.where(ExerciseHistory.exercise_id == exercise_id)

        stats = []
        for ex_id, name, sets, reps, volume, max_w, last, times in self.db.execute(stmt).all():
            stats.append(ExerciseStat(
                exercise_lib_id=ex_id,
                exercise_name=name,
                total_sets=int(sets),
                total_reps=int(reps),
                total_volume=float(volume),
                max_weight=float(max_w),
                last_performed=last.isoformat() if isinstance(last, datetime) else last,
                times_performed=int(times),
            ))
        return stats

    def aggregate_stats(self, profile_id: str, exercise_id: int) -> Optional[ExerciseStat]:
        found = self.exercise_stats(profile_id, exercise_id=exercise_id)
        return found[0] if found else None

    def list_by_profile(self, profile_id: str, *, limit: int = 50, offset: int = 0) -> Page[WorkoutHistory]:
        stmt = select(WorkoutHistory).where(WorkoutHistory.profile_id == profile_id)\
                                     .order_by(WorkoutHistory.completed_at.desc(),
                                               WorkoutHistory.workout_history_id.desc())
        return self.page_from_stmt(stmt, limit=limit, offset=offset)

    # WRITES
    def create(
        self,
        profile_id: str,
        *,
        workout_id: int | None,
        duration_minutes: int,
        completed_at: datetime,
    ) -> WorkoutHistory:
        header = WorkoutHistory(
            profile_id=profile_id,
            workout_id=workout_id,
            duration_minutes=duration_minutes,
            completed_at=completed_at,
        )
        try:
            self.add_and_refresh(header)
            self.db.commit()
            return header
        except SQLAlchemyError as e:
            self.db.rollback()
            log.exception("saving workout history failed for profile=%s", profile_id)
            raise PersistenceError("workout_history_failed") from e

    def add_sets(self, profile_id: str, workout_history_id: int, rows: list[dict]) -> int:
        """rows: dicts with exercise_id, set_number, reps, weight."""
        if not rows:
            return 0
        try:
            self.db.add_all([
                ExerciseHistory(profile_id=profile_id, workout_history_id=workout_history_id, **row)
                for row in rows
            ])
            self.db.commit()
            return len(rows)
        except SQLAlchemyError as e:
            self.db.rollback()
            log.exception("saving exercise history failed for workout_history=%s", workout_history_id)
            raise PersistenceError("exercise_history_failed") from e
