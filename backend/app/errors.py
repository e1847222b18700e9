# app/errors.py
# Domain errors raised below the routers; routers map them onto HTTPException.


class HistoryLookupError(RuntimeError):
    """Past performance or stats could not be read."""


class PersistenceError(RuntimeError):
    """A routine or history write failed."""


class BlockNotFound(LookupError):
    def __init__(self, exercise_id: int):
        super().__init__(f"exercise {exercise_id} is not in this workout")
        self.exercise_id = exercise_id


class SetNotFound(LookupError):
    def __init__(self, exercise_id: int, set_number: int):
        super().__init__(f"set {set_number} not found for exercise {exercise_id}")
        self.exercise_id = exercise_id
        self.set_number = set_number


class SessionNotFound(LookupError):
    pass
