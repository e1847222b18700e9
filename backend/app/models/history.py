from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, ForeignKey, DateTime, String, Numeric, func
from app.db import Base

class WorkoutHistory(Base):
    __tablename__ = "workout_history"
    workout_history_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[str] = mapped_column(ForeignKey("profiles.profile_id", ondelete="CASCADE"), index=True)
    workout_id: Mapped[int | None] = mapped_column(
        ForeignKey("workouts.workout_id", ondelete="SET NULL"), nullable=True
    )
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    profile = relationship("Profile", back_populates="history")
    workout = relationship("Workout")
    sets = relationship("ExerciseHistory", back_populates="workout_history", cascade="all, delete-orphan")

class ExerciseHistory(Base):
    __tablename__ = "exercise_history"
    exercise_history_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.profile_id", ondelete="CASCADE"), index=True)
    workout_history_id: Mapped[int] = mapped_column(
        ForeignKey("workout_history.workout_history_id", ondelete="CASCADE"), index=True
    )
    exercise_id: Mapped[int] = mapped_column(ForeignKey("exercise_library.exercise_lib_id"), index=True)
    set_number: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weight: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)

    workout_history = relationship("WorkoutHistory", back_populates="sets")
    exercise = relationship("ExerciseLibrary")
