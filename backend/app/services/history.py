# app/services/history.py
from __future__ import annotations
from typing import Callable, Iterable, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import HistoryLookupError
from app.repositories.history_repo import HistoryRepository
from app.services.domain import ExerciseStat, SetHistory


class HistorySource(Protocol):
    """What a workout session needs to know about the past. Read-only."""

    def get_last_performance(self, exercise_ids: Iterable[int]) -> dict[int, list[SetHistory]]: ...

    def get_aggregate_stats(self, exercise_id: int) -> Optional[ExerciseStat]: ...


class DatabaseHistorySource:
    """
    HistorySource for one profile backed by the history tables.

    Sessions outlive a request, so each lookup opens its own short-lived
    db session from the factory instead of borrowing the request's.
    """

    def __init__(self, session_factory: Callable[[], Session], profile_id: str):
        self.session_factory = session_factory
        self.profile_id = profile_id

    def get_last_performance(self, exercise_ids: Iterable[int]) -> dict[int, list[SetHistory]]:
        try:
            with self.session_factory() as db:
                return HistoryRepository(db).last_performance(self.profile_id, exercise_ids)
        except SQLAlchemyError as e:
            raise HistoryLookupError(str(e)) from e

    def get_aggregate_stats(self, exercise_id: int) -> Optional[ExerciseStat]:
        try:
            with self.session_factory() as db:
                return HistoryRepository(db).aggregate_stats(self.profile_id, exercise_id)
        except SQLAlchemyError as e:
            raise HistoryLookupError(str(e)) from e
