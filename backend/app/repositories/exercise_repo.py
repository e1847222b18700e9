from __future__ import annotations
from typing import Iterable, Optional
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models import ExerciseLibrary, ExerciseMuscle, Muscle
from app.services.domain import ExerciseRef

class ExerciseRepository:
    def __init__(self, db: Session):
        self.db = db

    # READS
    def get(self, exercise_id: int) -> Optional[ExerciseLibrary]:
        return self.db.get(ExerciseLibrary, exercise_id)

    def get_by_name(self, name: str) -> Optional[ExerciseLibrary]:
        stmt = select(ExerciseLibrary).where(func.lower(ExerciseLibrary.name) == name.lower())
        return self.db.execute(stmt).scalar_one_or_none()

    def search(
        self,
        *,
        q: str | None = None,
        category: str | None = None,
        equipment: str | None = None,
    ) -> list[ExerciseLibrary]:
        stmt = select(ExerciseLibrary).order_by(ExerciseLibrary.name.asc())
        if q:
            stmt = stmt.where(func.lower(ExerciseLibrary.name).contains(q.lower()))
        if category:
            stmt = stmt.where(func.lower(ExerciseLibrary.category) == category.lower())
        if equipment:
            stmt = stmt.where(func.lower(ExerciseLibrary.equipment) == equipment.lower())
        return list(self.db.execute(stmt).scalars().all())

    def grouped_by_primary_muscle(self) -> dict[str, list[ExerciseLibrary]]:
        stmt = (
            select(Muscle.name, ExerciseLibrary)
            .join(ExerciseMuscle, ExerciseMuscle.muscle_id == Muscle.muscle_id)
            .join(ExerciseLibrary, ExerciseLibrary.exercise_lib_id == ExerciseMuscle.exercise_lib_id)
            .where(ExerciseMuscle.is_primary.is_(True))
            .order_by(Muscle.name.asc(), ExerciseLibrary.name.asc())
        )
        grouped: dict[str, list[ExerciseLibrary]] = {}
        for muscle_name, exercise in self.db.execute(stmt).all():
            grouped.setdefault(muscle_name, []).append(exercise)
        return grouped

    def refs(self, exercise_ids: Iterable[int]) -> list[ExerciseRef]:
        """ExerciseRefs in the order asked for; unknown ids raise LookupError."""
        ids = list(exercise_ids)
        if not ids:
            return []
        found = {
            e.exercise_lib_id: e
            for e in self.db.execute(
                select(ExerciseLibrary).where(ExerciseLibrary.exercise_lib_id.in_(ids))
            ).scalars()
        }
        missing = [i for i in ids if i not in found]
        if missing:
            raise LookupError(f"unknown exercise ids: {missing}")
        return [to_ref(found[i]) for i in ids]

    # WRITES
    def create(
        self,
        *,
        name: str,
        category: str | None = None,
        equipment: str | None = None,
        video_link: str | None = None,
        image_name: str | None = None,
        muscles: Iterable[tuple[str, str, bool]] = (),
    ) -> ExerciseLibrary:
        """muscles: (muscle_id, muscle name, is_primary) triples."""
        ex = ExerciseLibrary(name=name, category=category, equipment=equipment,
                             video_link=video_link, image_name=image_name)
        try:
            for muscle_id, muscle_name, is_primary in muscles:
                muscle = self.db.get(Muscle, muscle_id) or Muscle(muscle_id=muscle_id, name=muscle_name)
                ex.muscles.append(ExerciseMuscle(muscle=muscle, is_primary=is_primary))
            self.db.add(ex)
            self.db.commit()
            self.db.refresh(ex)
            return ex
        except IntegrityError:
            self.db.rollback()
            raise ValueError("exercise_already_exists")

def to_ref(ex: ExerciseLibrary) -> ExerciseRef:
    return ExerciseRef(id=ex.exercise_lib_id, name=ex.name, category=ex.category, equipment=ex.equipment)
