import pytest

from app.errors import BlockNotFound, HistoryLookupError, SetNotFound
from app.services.domain import ExerciseRef, ExerciseStat, SetHistory
from app.services.workout_session import WorkoutSession, parse_numeric

SQUAT = ExerciseRef(id=1, name="Squat", category="Legs", equipment="Barbell")
BENCH = ExerciseRef(id=2, name="Bench Press", category="Chest", equipment="Barbell")
ROW = ExerciseRef(id=3, name="Row", category="Back")


class FakeHistory:
    """In-memory HistorySource; `stats` maps exercise id -> max weight."""
    def __init__(self, last=None, stats=None, fail=False):
        self.last = last or {}
        self.stats = stats or {}
        self.fail = fail
        self.last_calls = []
        self.stats_calls = []

    def get_last_performance(self, exercise_ids):
        ids = list(exercise_ids)
        self.last_calls.append(ids)
        if self.fail:
            raise HistoryLookupError("db down")
        return {i: self.last[i] for i in ids if i in self.last}

    def get_aggregate_stats(self, exercise_id):
        self.stats_calls.append(exercise_id)
        if self.fail:
            raise HistoryLookupError("db down")
        if exercise_id not in self.stats:
            return None
        return ExerciseStat(exercise_lib_id=exercise_id, exercise_name="?", max_weight=self.stats[exercise_id])


def session_with(*refs, **history):
    s = WorkoutSession(FakeHistory(**history))
    s.load_session(list(refs))
    return s

def fill(s, ex_id, set_number, reps, weight):
    s.update_set_field(ex_id, set_number, "reps", str(reps))
    s.update_set_field(ex_id, set_number, "weight", str(weight))

def sets_of(s, ex_id):
    return next(b for b in s.blocks if b.exercise_id == ex_id).sets


# --- loading ---
def test_load_without_plan_is_empty():
    s = WorkoutSession(FakeHistory())
    assert s.load_session(None) == []
    assert s.is_modified is False

def test_load_seeds_from_last_performance_in_one_lookup():
    history = FakeHistory(last={1: [SetHistory(2, 6, 110), SetHistory(1, 8, 100)]})
    s = WorkoutSession(history)
    s.load_session([SQUAT, BENCH])

    assert history.last_calls == [[1, 2]]
    squat = sets_of(s, 1)
    assert [e.set_number for e in squat] == [1, 2]
    assert [(e.previous_reps, e.previous_weight) for e in squat] == [(8, 100), (6, 110)]
    assert all(e.reps == 0 and e.weight == 0 for e in squat)
    # no history -> default blank sets
    bench = sets_of(s, 2)
    assert len(bench) == 3
    assert all(e.previous_reps is None for e in bench)

def test_history_failure_falls_back_to_blank_sets():
    s = session_with(SQUAT, fail=True)
    assert len(sets_of(s, 1)) == 3
    assert all(e.previous_weight is None for e in sets_of(s, 1))

def test_stats_failure_treated_as_first_time():
    s = session_with(SQUAT, fail=True)
    fill(s, 1, 1, 5, 20)
    s.toggle_set_done(1, 1)
    assert s.achieved_prs[1].previous_weight == 0

def test_default_set_count_is_configurable():
    s = WorkoutSession(FakeHistory(), default_set_count=5)
    s.load_session([SQUAT])
    assert len(sets_of(s, 1)) == 5


# --- exercises ---
def test_add_exercise_toggles():
    s = session_with(SQUAT, stats={2: 50})
    s.add_exercise(BENCH)
    assert s.exercise_ids == [1, 2]
    fill(s, 2, 1, 5, 60)
    s.toggle_set_done(2, 1)
    assert 2 in s.achieved_prs

    s.add_exercise(BENCH)
    assert s.exercise_ids == [1]
    assert 2 not in s.achieved_prs

def test_history_is_fetched_once_per_exercise():
    history = FakeHistory(last={2: [SetHistory(1, 5, 60)]})
    s = WorkoutSession(history)
    s.load_session([SQUAT, BENCH])
    s.remove_exercise(2)
    s.add_exercise(BENCH)
    assert history.last_calls == [[1, 2]]
    assert sets_of(s, 2)[0].previous_weight == 60

def test_remove_unknown_exercise():
    s = session_with(SQUAT)
    with pytest.raises(BlockNotFound):
        s.remove_exercise(99)


# --- sets ---
def test_set_numbers_stay_dense():
    s = session_with(SQUAT)
    s.add_set(1)            # 1..4
    s.remove_set(1, 2)      # 1..3
    s.add_set(1)            # 1..4
    s.remove_set(1, 1)      # 1..3
    s.remove_set(1, 3)      # 1..2
    s.add_set(1)            # 1..3
    assert [e.set_number for e in sets_of(s, 1)] == [1, 2, 3]

def test_remove_set_keeps_values_of_the_others():
    s = session_with(SQUAT)
    fill(s, 1, 3, 7, 70)
    s.remove_set(1, 1)
    moved = sets_of(s, 1)[1]
    assert (moved.set_number, moved.reps, moved.weight) == (2, 7, 70)

def test_unknown_set_raises():
    s = session_with(SQUAT)
    with pytest.raises(SetNotFound):
        s.toggle_set_done(1, 9)
    with pytest.raises(SetNotFound):
        s.remove_set(1, 9)

def test_parse_numeric():
    assert parse_numeric("135") == 135
    assert parse_numeric("1a2 lbs") == 12
    assert parse_numeric("") == 0
    assert parse_numeric("abc") == 0
    assert parse_numeric(None) == 0

def test_parse_numeric_ascii_digits_only():
    assert parse_numeric("٣") == 0
    assert parse_numeric("1٣ 2") == 12

def test_parse_numeric_oversized_input_is_zero():
    assert parse_numeric("1" * 5000) == 0

def test_unknown_field_rejected():
    s = session_with(SQUAT)
    with pytest.raises(ValueError):
        s.update_set_field(1, 1, "tempo", "3")


# --- PR tracking ---
def test_toggle_on_then_off_restores_flags():
    s = session_with(SQUAT, stats={1: 100})
    fill(s, 1, 1, 5, 120)

    entry = s.toggle_set_done(1, 1)
    assert entry.is_pr and entry.just_achieved
    assert s.achieved_prs[1].new_weight == 120

    entry = s.toggle_set_done(1, 1)
    assert not entry.done and not entry.is_pr and not entry.just_achieved
    assert (entry.reps, entry.weight) == (5, 120)
    assert s.achieved_prs == {}

def test_tied_session_max_flags_every_tied_set():
    s = session_with(SQUAT, stats={1: 100})
    for n, w in [(1, 80), (2, 120), (3, 120)]:
        fill(s, 1, n, 5, w)
        s.toggle_set_done(1, n)

    assert [e.is_pr for e in sets_of(s, 1)] == [False, True, True]
    pr = s.achieved_prs[1]
    assert (pr.new_weight, pr.previous_weight) == (120, 100)

def test_first_time_with_zero_weight_is_not_a_pr():
    s = session_with(SQUAT)
    s.update_set_field(1, 1, "reps", "10")
    s.toggle_set_done(1, 1)
    assert s.achieved_prs == {}
    assert not sets_of(s, 1)[0].is_pr

def test_first_time_any_weight_is_a_pr():
    s = session_with(SQUAT)
    fill(s, 1, 1, 5, 45)
    s.toggle_set_done(1, 1)
    assert s.achieved_prs[1].previous_weight == 0
    assert s.achieved_prs[1].new_weight == 45

def test_lowering_weight_hands_the_flag_to_the_next_best_set():
    s = session_with(SQUAT, stats={1: 100})
    fill(s, 1, 1, 5, 130)
    fill(s, 1, 2, 5, 120)
    s.toggle_set_done(1, 1)
    s.toggle_set_done(1, 2)
    assert [e.is_pr for e in sets_of(s, 1)][:2] == [True, False]

    s.update_set_field(1, 1, "weight", "110")
    flags = [e.is_pr for e in sets_of(s, 1)]
    assert flags[:2] == [False, True]
    assert s.achieved_prs[1].new_weight == 120

def test_lowering_below_history_drops_the_pr():
    s = session_with(SQUAT, stats={1: 100})
    fill(s, 1, 1, 5, 130)
    s.toggle_set_done(1, 1)
    s.update_set_field(1, 1, "weight", "95")
    assert s.achieved_prs == {}
    assert not sets_of(s, 1)[0].is_pr

def test_lighter_completion_is_not_celebrated():
    s = session_with(SQUAT, stats={1: 100})
    fill(s, 1, 1, 5, 130)
    fill(s, 1, 2, 5, 120)
    s.toggle_set_done(1, 1)
    second = s.toggle_set_done(1, 2)
    assert not second.just_achieved and not second.is_pr

def test_heavier_completion_takes_over():
    s = session_with(SQUAT, stats={1: 100})
    fill(s, 1, 1, 5, 120)
    fill(s, 1, 2, 5, 140)
    s.toggle_set_done(1, 1)
    second = s.toggle_set_done(1, 2)
    assert second.is_pr and second.just_achieved
    first = sets_of(s, 1)[0]
    assert not first.is_pr and not first.just_achieved
    assert s.achieved_prs[1].new_weight == 140

def test_uncompleting_the_pr_set_re_elects():
    s = session_with(SQUAT, stats={1: 100})
    fill(s, 1, 1, 5, 110)
    fill(s, 1, 2, 5, 140)
    s.toggle_set_done(1, 1)
    s.toggle_set_done(1, 2)
    s.toggle_set_done(1, 2)
    assert sets_of(s, 1)[0].is_pr
    assert s.achieved_prs[1].new_weight == 110

def test_removing_the_pr_set_recomputes():
    s = session_with(SQUAT, stats={1: 100})
    fill(s, 1, 1, 5, 140)
    s.toggle_set_done(1, 1)
    s.remove_set(1, 1)
    assert s.achieved_prs == {}

def test_reps_edit_clears_transient_flag_only():
    s = session_with(SQUAT, stats={1: 100})
    fill(s, 1, 1, 5, 140)
    s.toggle_set_done(1, 1)
    entry = s.update_set_field(1, 1, "reps", "6")
    assert entry.is_pr and not entry.just_achieved
    assert 1 in s.achieved_prs

def test_clear_transient_flag_keeps_pr():
    s = session_with(SQUAT, stats={1: 100})
    fill(s, 1, 1, 5, 140)
    s.toggle_set_done(1, 1)
    entry = s.clear_transient_flag(1, 1)
    assert entry.is_pr and not entry.just_achieved

def test_prs_follow_block_order():
    s = session_with(SQUAT, BENCH)
    fill(s, 2, 1, 5, 60)
    s.toggle_set_done(2, 1)
    fill(s, 1, 1, 5, 100)
    s.toggle_set_done(1, 1)
    assert [pr.exercise_id for pr in s.prs] == [1, 2]


# --- derived ---
def test_totals_count_completed_sets_only():
    s = session_with(SQUAT, BENCH)
    fill(s, 1, 1, 5, 100)
    fill(s, 1, 2, 3, 120)
    fill(s, 2, 1, 10, 50)
    s.toggle_set_done(1, 1)
    s.toggle_set_done(2, 1)
    assert s.total_sets == 6
    assert s.completed_sets == 2
    assert s.total_reps == 15
    assert s.total_weight == 5 * 100 + 10 * 50

def test_modified_when_exercise_removed():
    s = session_with(SQUAT, BENCH, ROW)
    assert not s.is_modified
    s.remove_exercise(2)
    assert s.is_modified

def test_modified_when_reordered():
    s = session_with(SQUAT, BENCH)
    s.remove_exercise(1)
    s.add_exercise(SQUAT)
    assert s.exercise_ids == [2, 1]
    assert s.is_modified

def test_elapsed_seconds_uses_clock():
    ticks = iter([1000.0, 1125.9])
    s = WorkoutSession(FakeHistory(), clock=lambda: next(ticks))
    assert s.elapsed_seconds == 125

def test_persist_routine_defaults():
    assert WorkoutSession(FakeHistory(), routine_id=4).persist_routine is True
    s = WorkoutSession(FakeHistory())
    assert s.persist_routine is False
    s.set_persist_routine(True)
    assert s.persist_routine is True
