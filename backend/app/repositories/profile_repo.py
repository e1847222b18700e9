# app/repositories/profile_repo.py
from __future__ import annotations
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import Profile

class ProfileRepository:
    def __init__(self, db: Session):
        self.db = db

    # READS
    def get(self, profile_id: str) -> Optional[Profile]:
        return self.db.get(Profile, profile_id)

    def get_by_email(self, email: str) -> Optional[Profile]:
        stmt = select(Profile).where(func.lower(Profile.email) == email.lower())
        return self.db.execute(stmt).scalar_one_or_none()

    # WRITES
    def create(self, profile_id: str, *, email: str | None = None, username: str | None = None) -> Profile:
        """Mirrors the signup trigger; the API itself never creates profiles."""
        profile = Profile(profile_id=profile_id, email=email, username=username)
        try:
            self.db.add(profile)
            self.db.commit()
            self.db.refresh(profile)
            return profile
        except IntegrityError:
            self.db.rollback()
            raise ValueError("profile_already_exists")

    def update_username(self, profile_id: str, *, username: str) -> Optional[Profile]:
        profile = self.get(profile_id)
        if not profile:
            return None
        profile.username = username
        self.db.commit()
        self.db.refresh(profile)
        return profile
