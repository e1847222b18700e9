from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from app.db import get_db
from app.repositories.history_repo import HistoryRepository
from app.repositories.profile_repo import ProfileRepository
from app.schemas.profile import (
    ExerciseStatRead,
    ProfileRead,
    ProfileUpdate,
    WorkoutHistoryPage,
    WorkoutHistoryRead,
)
from app.deps.auth import get_current_profile
from app.models import Profile

router = APIRouter(prefix="/profiles", tags=["profiles"])

@router.get("/me", response_model=ProfileRead)
def me(current: Profile = Depends(get_current_profile)):
    return current

@router.patch("/me", response_model=ProfileRead)
def update_me(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
):
    profile = ProfileRepository(db).update_username(current.profile_id, username=payload.username)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile

@router.get("/me/stats", response_model=list[ExerciseStatRead])
def my_exercise_stats(db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    return [ExerciseStatRead.model_validate(s) for s in HistoryRepository(db).exercise_stats(current.profile_id)]

@router.get("/me/history", response_model=WorkoutHistoryPage)
def my_history(
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    page = HistoryRepository(db).list_by_profile(current.profile_id, limit=limit, offset=offset)
    return WorkoutHistoryPage(
        items=[WorkoutHistoryRead.model_validate(h) for h in page.items],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )
