from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from app.db import get_db, SessionLocal
from app.errors import BlockNotFound, SessionNotFound, SetNotFound
from app.models import Profile
from app.schemas.session import (
    AchievedPRRead,
    CompletionSummaryRead,
    ExerciseBlockRead,
    FinishRequest,
    PersistRoutineUpdate,
    SessionRead,
    SessionStart,
    SetFieldUpdate,
)
from app.repositories.exercise_repo import ExerciseRepository, to_ref
from app.repositories.history_repo import HistoryRepository
from app.repositories.workout_repo import WorkoutRepository
from app.services.completion import CompletionState, WorkoutCompletion
from app.services.history import DatabaseHistorySource
from app.services.registry import ActiveSession, SessionRegistry, get_registry
from app.services.workout_session import WorkoutSession
from app.deps.auth import get_current_profile
from app.settings import get_settings

router = APIRouter(prefix="/sessions", tags=["sessions"])

def view(active: ActiveSession) -> SessionRead:
    s = active.session
    return SessionRead(
        session_id=active.session_id,
        workout_id=s.routine_id,
        workout_name=s.routine_name,
        persist_routine=s.persist_routine,
        is_modified=s.is_modified,
        elapsed_seconds=s.elapsed_seconds,
        total_sets=s.total_sets,
        completed_sets=s.completed_sets,
        total_reps=s.total_reps,
        total_weight=s.total_weight,
        blocks=[ExerciseBlockRead.model_validate(b) for b in s.blocks],
        prs=[AchievedPRRead.model_validate(pr) for pr in s.prs],
    )

def get_active(
    session_id: str,
    current: Profile = Depends(get_current_profile),
    registry: SessionRegistry = Depends(get_registry),
) -> ActiveSession:
    try:
        return registry.get(session_id, current.profile_id)
    except SessionNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")

def apply(active: ActiveSession, op, *args) -> SessionRead:
    with active.lock:
        try:
            op(*args)
        except BlockNotFound:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not in this workout")
        except SetNotFound:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Set not found")
        return view(active)

@router.post("", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def start_session(
    payload: SessionStart,
    db: Session = Depends(get_db),
    current: Profile = Depends(get_current_profile),
    registry: SessionRegistry = Depends(get_registry),
):
    history = DatabaseHistorySource(SessionLocal, current.profile_id)
    settings = get_settings()

    if payload.workout_id is not None:
        routine = WorkoutRepository(db).get_owned(payload.workout_id, current.profile_id)
        if not routine:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
        plan = [to_ref(we.exercise) for we in routine.exercises]
        session = WorkoutSession(history, routine_id=routine.workout_id, routine_name=routine.workout_name,
                                 default_set_count=settings.DEFAULT_SET_COUNT)
    else:
        try:
            plan = ExerciseRepository(db).refs(payload.exercise_ids or [])
        except LookupError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        session = WorkoutSession(history, routine_name=payload.workout_name,
                                 default_set_count=settings.DEFAULT_SET_COUNT)

    session.load_session(plan or None)
    return view(registry.add(current.profile_id, session))

@router.get("/{session_id}", response_model=SessionRead)
def get_session(active: ActiveSession = Depends(get_active)):
    return view(active)

@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def abandon_session(active: ActiveSession = Depends(get_active),
                    registry: SessionRegistry = Depends(get_registry)):
    registry.discard(active.session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/{session_id}/exercises/{exercise_id}", response_model=SessionRead)
def toggle_exercise(exercise_id: int, db: Session = Depends(get_db),
                    active: ActiveSession = Depends(get_active)):
    ex = ExerciseRepository(db).get(exercise_id)
    if not ex:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")
    return apply(active, active.session.add_exercise, to_ref(ex))

@router.delete("/{session_id}/exercises/{exercise_id}", response_model=SessionRead)
def remove_exercise(exercise_id: int, active: ActiveSession = Depends(get_active)):
    return apply(active, active.session.remove_exercise, exercise_id)

@router.post("/{session_id}/exercises/{exercise_id}/sets", response_model=SessionRead,
             status_code=status.HTTP_201_CREATED)
def add_set(exercise_id: int, active: ActiveSession = Depends(get_active)):
    return apply(active, active.session.add_set, exercise_id)

@router.delete("/{session_id}/exercises/{exercise_id}/sets/{set_number}", response_model=SessionRead)
def remove_set(exercise_id: int, set_number: int, active: ActiveSession = Depends(get_active)):
    return apply(active, active.session.remove_set, exercise_id, set_number)

@router.patch("/{session_id}/exercises/{exercise_id}/sets/{set_number}", response_model=SessionRead)
def update_set(exercise_id: int, set_number: int, payload: SetFieldUpdate,
               active: ActiveSession = Depends(get_active)):
    return apply(active, active.session.update_set_field, exercise_id, set_number, payload.field, payload.value)

@router.post("/{session_id}/exercises/{exercise_id}/sets/{set_number}/toggle", response_model=SessionRead)
def toggle_set(exercise_id: int, set_number: int, active: ActiveSession = Depends(get_active)):
    return apply(active, active.session.toggle_set_done, exercise_id, set_number)

@router.post("/{session_id}/exercises/{exercise_id}/sets/{set_number}/ack", response_model=SessionRead)
def acknowledge_pr(exercise_id: int, set_number: int, active: ActiveSession = Depends(get_active)):
    return apply(active, active.session.clear_transient_flag, exercise_id, set_number)

@router.put("/{session_id}/persist-routine", response_model=SessionRead)
def set_persist_routine(payload: PersistRoutineUpdate, active: ActiveSession = Depends(get_active)):
    return apply(active, active.session.set_persist_routine, payload.persist)

@router.post("/{session_id}/finish", response_model=CompletionSummaryRead)
def finish_session(
    payload: FinishRequest,
    db: Session = Depends(get_db),
    active: ActiveSession = Depends(get_active),
    registry: SessionRegistry = Depends(get_registry),
):
    completion = WorkoutCompletion(WorkoutRepository(db), HistoryRepository(db))
    with active.lock:
        result = completion.finish(
            active.session,
            active.profile_id,
            action=payload.action,
            routine_name=payload.routine_name,
        )
    if result.state is CompletionState.failed:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=result.message)
    if result.blocked:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "state": result.state.value,
                "message": result.message,
                "options": [o.value for o in result.options],
            },
        )
    registry.discard(active.session_id)
    return CompletionSummaryRead.model_validate(result.summary)
