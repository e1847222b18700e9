from __future__ import annotations
import logging
from typing import Optional, Sequence
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.errors import PersistenceError
from app.models import Workout, WorkoutExercise

log = logging.getLogger(__name__)

class WorkoutRepository:
    """Saved routines. Every write commits on its own; nothing is rolled back across calls."""
    def __init__(self, db: Session):
        self.db = db

    def get(self, workout_id: int) -> Optional[Workout]:
        return self.db.get(Workout, workout_id)

    def get_owned(self, workout_id: int, profile_id: str) -> Optional[Workout]:
        w = self.get(workout_id)
        if not w or w.profile_id != profile_id:
            return None
        return w

    def list_by_profile(self, profile_id: str) -> list[Workout]:
        stmt = select(Workout).where(Workout.profile_id == profile_id)\
                              .order_by(Workout.created_at.desc(), Workout.workout_id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def create(self, profile_id: str, *, workout_name: str) -> Workout:
        w = Workout(profile_id=profile_id, workout_name=workout_name)
        try:
            self.db.add(w)
            self.db.commit()
            self.db.refresh(w)
            return w
        except SQLAlchemyError as e:
            self.db.rollback()
            log.exception("creating routine failed for profile=%s", profile_id)
            raise PersistenceError("workout_create_failed") from e

    def add_exercises(self, workout_id: int, exercise_ids: Sequence[int]) -> None:
        rows = [
            WorkoutExercise(workout_id=workout_id, exercise_lib_id=ex_id, exercise_order=i)
            for i, ex_id in enumerate(exercise_ids, start=1)
        ]
        try:
            self.db.add_all(rows)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.exception("saving routine exercises failed for workout=%s", workout_id)
            raise PersistenceError("workout_exercises_failed") from e

    def replace_exercises(self, workout_id: int, exercise_ids: Sequence[int]) -> None:
        try:
            self.db.execute(delete(WorkoutExercise).where(WorkoutExercise.workout_id == workout_id))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.exception("clearing routine exercises failed for workout=%s", workout_id)
            raise PersistenceError("workout_exercises_failed") from e
        self.db.expire_all()
        self.add_exercises(workout_id, exercise_ids)

    def create_with_exercises(self, profile_id: str, *, workout_name: str, exercise_ids: Sequence[int]) -> Workout:
        w = self.create(profile_id, workout_name=workout_name)
        self.add_exercises(w.workout_id, exercise_ids)
        self.db.refresh(w)
        return w

    def delete(self, workout_id: int) -> bool:
        w = self.get(workout_id)
        if not w:
            return False
        self.db.delete(w)
        self.db.commit()
        return True
