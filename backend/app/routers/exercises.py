from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from app.db import get_db
from app.schemas.exercise import ExerciseRead, ExerciseSummary
from app.repositories.exercise_repo import ExerciseRepository
from app.deps.auth import get_current_profile

router = APIRouter(prefix="/exercises", tags=["exercises"], dependencies=[Depends(get_current_profile)])

@router.get("", response_model=list[ExerciseRead])
def list_exercises(
    db: Session = Depends(get_db),
    q: str | None = Query(None, max_length=120, description="substring of the name"),
    name: str | None = Query(None, max_length=120, description="exact name, any case"),
    category: str | None = Query(None, max_length=60),
    equipment: str | None = Query(None, max_length=60),
):
    repo = ExerciseRepository(db)
    if name:
        ex = repo.get_by_name(name)
        return [ExerciseRead.from_model(ex)] if ex else []
    return [ExerciseRead.from_model(ex) for ex in repo.search(q=q, category=category, equipment=equipment)]

@router.get("/grouped", response_model=dict[str, list[ExerciseSummary]])
def exercises_by_primary_muscle(db: Session = Depends(get_db)):
    grouped = ExerciseRepository(db).grouped_by_primary_muscle()
    return {
        muscle: [ExerciseSummary.model_validate(ex) for ex in exercises]
        for muscle, exercises in grouped.items()
    }

@router.get("/{exercise_id}", response_model=ExerciseRead)
def get_exercise(exercise_id: int, db: Session = Depends(get_db)):
    ex = ExerciseRepository(db).get(exercise_id)
    if not ex:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")
    return ExerciseRead.from_model(ex)
