from app.models.profile import Profile
from app.models.exercise import ExerciseLibrary, Muscle, ExerciseMuscle
from app.models.workout import Workout, WorkoutExercise
from app.models.history import WorkoutHistory, ExerciseHistory

__all__ = [
    "Profile",
    "ExerciseLibrary",
    "Muscle",
    "ExerciseMuscle",
    "Workout",
    "WorkoutExercise",
    "WorkoutHistory",
    "ExerciseHistory",
]
