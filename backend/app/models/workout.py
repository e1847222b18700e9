from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, ForeignKey, DateTime, String, func
from app.db import Base

class Workout(Base):
    """A saved routine: a named, ordered list of exercises."""
    __tablename__ = "workouts"
    workout_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[str] = mapped_column(ForeignKey("profiles.profile_id", ondelete="CASCADE"), index=True)
    workout_name: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    profile = relationship("Profile", back_populates="workouts")
    exercises = relationship(
        "WorkoutExercise",
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by="WorkoutExercise.exercise_order",
    )

class WorkoutExercise(Base):
    __tablename__ = "workout_exercises"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("workouts.workout_id", ondelete="CASCADE"), index=True)
    exercise_lib_id: Mapped[int] = mapped_column(ForeignKey("exercise_library.exercise_lib_id"), nullable=False)
    exercise_order: Mapped[int] = mapped_column(Integer, nullable=False)

    workout = relationship("Workout", back_populates="exercises")
    exercise = relationship("ExerciseLibrary", lazy="joined")
