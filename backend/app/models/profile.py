from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, func
from app.db import Base

class Profile(Base):
    __tablename__ = "profiles"

    # Supabase auth user id (uuid); the row is created by the signup trigger
    profile_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, index=True, nullable=True)
    username: Mapped[str | None] = mapped_column(String(120), nullable=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    workouts = relationship("Workout", back_populates="profile", cascade="all, delete-orphan")
    history = relationship("WorkoutHistory", back_populates="profile", cascade="all, delete-orphan")
