from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from app.db import get_db
from app.errors import PersistenceError
from app.schemas.workout import WorkoutCreate, WorkoutRead
from app.repositories.exercise_repo import ExerciseRepository
from app.repositories.workout_repo import WorkoutRepository
from app.deps.auth import get_current_profile
from app.models import Profile

router = APIRouter(prefix="/workouts", tags=["workouts"])

@router.post("", response_model=WorkoutRead, status_code=status.HTTP_201_CREATED)
def create_workout(
    payload: WorkoutCreate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    try:
        ExerciseRepository(db).refs(payload.exercise_ids)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        w = WorkoutRepository(db).create_with_exercises(
            current.profile_id,
            workout_name=payload.workout_name,
            exercise_ids=payload.exercise_ids,
        )
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to save workout. Please try again.")
    return WorkoutRead.from_model(w)

@router.get("", response_model=list[WorkoutRead])
def list_my_workouts(db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    return [WorkoutRead.from_model(w) for w in WorkoutRepository(db).list_by_profile(current.profile_id)]

@router.get("/{workout_id}", response_model=WorkoutRead)
def get_workout(workout_id: int, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    w = WorkoutRepository(db).get_owned(workout_id, current.profile_id)
    if not w:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    return WorkoutRead.from_model(w)

@router.delete("/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workout(workout_id: int, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    repo = WorkoutRepository(db)
    if not repo.get_owned(workout_id, current.profile_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    repo.delete(workout_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
