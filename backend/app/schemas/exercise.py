from pydantic import BaseModel

class MuscleRead(BaseModel):
    muscle_id: str
    name: str
    is_primary: bool

class ExerciseSummary(BaseModel):
    exercise_lib_id: int
    name: str
    category: str | None = None
    equipment: str | None = None
    video_link: str | None = None
    image_name: str | None = None

    model_config = {"from_attributes": True}

class ExerciseRead(ExerciseSummary):
    muscles: list[MuscleRead] = []

    @classmethod
    def from_model(cls, ex) -> "ExerciseRead":
        # flatten exercise_muscles -> muscles so clients don't walk the join table
        return cls(
            exercise_lib_id=ex.exercise_lib_id,
            name=ex.name,
            category=ex.category,
            equipment=ex.equipment,
            video_link=ex.video_link,
            image_name=ex.image_name,
            muscles=[
                MuscleRead(muscle_id=em.muscle.muscle_id, name=em.muscle.name, is_primary=em.is_primary)
                for em in ex.muscles
            ],
        )
