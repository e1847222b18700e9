from datetime import datetime, timedelta, timezone
from sqlalchemy.exc import OperationalError
from app.db import SessionLocal
from app.errors import HistoryLookupError, PersistenceError
from app.repositories.exercise_repo import ExerciseRepository
from app.repositories.history_repo import HistoryRepository
from app.repositories.profile_repo import ProfileRepository
from app.repositories.workout_repo import WorkoutRepository
from app.services.domain import SetHistory
from app.services.history import DatabaseHistorySource
import uuid, pytest

T0 = datetime(2026, 10, 1, 7, 0, tzinfo=timezone.utc)

def new_profile(db):
    pid = str(uuid.uuid4())
    ProfileRepository(db).create(pid, email=f"{pid[:8]}@ex.com")
    return pid

def new_exercise(db, label="Ex"):
    return ExerciseRepository(db).create(name=f"{label} {uuid.uuid4().hex[:8]}").exercise_lib_id

def log_workout(repo, pid, when, sets):
    h = repo.create(pid, workout_id=None, duration_minutes=30, completed_at=when)
    repo.add_sets(pid, h.workout_history_id, sets)
    return h

def test_last_performance_is_the_most_recent_session():
    db = SessionLocal()
    pid = new_profile(db)
    squat, bench = new_exercise(db, "Squat"), new_exercise(db, "Bench")
    repo = HistoryRepository(db)
    log_workout(repo, pid, T0, [
        {"exercise_id": squat, "set_number": 1, "reps": 5, "weight": 100},
        {"exercise_id": bench, "set_number": 1, "reps": 8, "weight": 60},
    ])
    log_workout(repo, pid, T0 + timedelta(days=2), [
        {"exercise_id": squat, "set_number": 2, "reps": 3, "weight": 120},
        {"exercise_id": squat, "set_number": 1, "reps": 5, "weight": 110},
    ])

    last = repo.last_performance(pid, [squat, bench])
    assert last[squat] == [SetHistory(1, 5, 110.0), SetHistory(2, 3, 120.0)]
    assert last[bench] == [SetHistory(1, 8, 60.0)]
    assert repo.last_performance(pid, []) == {}
    # another profile sees nothing
    assert repo.last_performance(new_profile(db), [squat]) == {}
    db.close()

def test_exercise_stats_aggregate_all_sessions():
    db = SessionLocal()
    pid = new_profile(db)
    squat = new_exercise(db, "Squat")
    repo = HistoryRepository(db)
    log_workout(repo, pid, T0, [{"exercise_id": squat, "set_number": 1, "reps": 5, "weight": 100}])
    log_workout(repo, pid, T0 + timedelta(days=1), [
        {"exercise_id": squat, "set_number": 1, "reps": 5, "weight": 120},
        {"exercise_id": squat, "set_number": 2, "reps": 2, "weight": 130},
    ])

    stat = repo.aggregate_stats(pid, squat)
    assert stat.max_weight == 130
    assert stat.total_sets == 3
    assert stat.total_reps == 12
    assert stat.total_volume == 5 * 100 + 5 * 120 + 2 * 130
    assert stat.times_performed == 2
    assert stat.last_performed is not None
    assert repo.aggregate_stats(pid, new_exercise(db)) is None
    assert [s.exercise_lib_id for s in repo.exercise_stats(pid)] == [squat]
    db.close()

def test_history_page():
    db = SessionLocal()
    pid = new_profile(db)
    ex = new_exercise(db)
    repo = HistoryRepository(db)
    for d in range(3):
        log_workout(repo, pid, T0 + timedelta(days=d), [{"exercise_id": ex, "set_number": 1, "reps": 1, "weight": 1}])
    page = repo.list_by_profile(pid, limit=2)
    assert page.total == 3
    assert len(page.items) == 2
    assert page.items[0].completed_at.day == (T0 + timedelta(days=2)).day
    db.close()

def test_failed_set_insert_raises_persistence_error():
    db = SessionLocal()
    pid = new_profile(db)
    repo = HistoryRepository(db)
    h = repo.create(pid, workout_id=None, duration_minutes=1, completed_at=T0)
    with pytest.raises(PersistenceError):
        repo.add_sets(pid, h.workout_history_id, [{"exercise_id": new_exercise(db), "set_number": None, "reps": 1, "weight": 1}])
    db.close()

def test_routine_exercises_are_replaced_in_order():
    db = SessionLocal()
    pid = new_profile(db)
    a, b, c = new_exercise(db, "A"), new_exercise(db, "B"), new_exercise(db, "C")
    repo = WorkoutRepository(db)
    w = repo.create_with_exercises(pid, workout_name="Full Body", exercise_ids=[a, b, c])
    assert [(we.exercise_lib_id, we.exercise_order) for we in w.exercises] == [(a, 1), (b, 2), (c, 3)]

    repo.replace_exercises(w.workout_id, [c, a])
    w = repo.get(w.workout_id)
    assert [(we.exercise_lib_id, we.exercise_order) for we in w.exercises] == [(c, 1), (a, 2)]
    assert repo.get_owned(w.workout_id, new_profile(db)) is None
    db.close()

def test_history_source_reads_with_its_own_session():
    db = SessionLocal()
    pid = new_profile(db)
    ex = new_exercise(db)
    log_workout(HistoryRepository(db), pid, T0, [{"exercise_id": ex, "set_number": 1, "reps": 5, "weight": 80}])
    db.close()

    source = DatabaseHistorySource(SessionLocal, pid)
    assert source.get_last_performance([ex]) == {ex: [SetHistory(1, 5, 80.0)]}
    assert source.get_aggregate_stats(ex).max_weight == 80

def test_history_source_wraps_db_errors():
    def broken_factory():
        raise OperationalError("SELECT 1", {}, Exception("db down"))

    source = DatabaseHistorySource(broken_factory, "nobody")
    with pytest.raises(HistoryLookupError):
        source.get_last_performance([1])
    with pytest.raises(HistoryLookupError):
        source.get_aggregate_stats(1)

def test_duplicate_profile_rejected():
    db = SessionLocal()
    pid = new_profile(db)
    with pytest.raises(ValueError):
        ProfileRepository(db).create(pid)
    db.close()
