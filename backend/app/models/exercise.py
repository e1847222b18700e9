from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, ForeignKey, String, Boolean, Text
from app.db import Base

class ExerciseLibrary(Base):
    __tablename__ = "exercise_library"
    exercise_lib_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    category: Mapped[str | None] = mapped_column(String(60), nullable=True)
    equipment: Mapped[str | None] = mapped_column(String(60), nullable=True)
    video_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    muscles = relationship("ExerciseMuscle", back_populates="exercise", cascade="all, delete-orphan",
                           lazy="selectin")

class Muscle(Base):
    __tablename__ = "muscles"
    muscle_id: Mapped[str] = mapped_column(String(40), primary_key=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False)

class ExerciseMuscle(Base):
    __tablename__ = "exercise_muscles"
    exercise_lib_id: Mapped[int] = mapped_column(
        ForeignKey("exercise_library.exercise_lib_id", ondelete="CASCADE"), primary_key=True
    )
    muscle_id: Mapped[str] = mapped_column(ForeignKey("muscles.muscle_id", ondelete="CASCADE"), primary_key=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    exercise = relationship("ExerciseLibrary", back_populates="muscles")
    muscle = relationship("Muscle", lazy="joined")
