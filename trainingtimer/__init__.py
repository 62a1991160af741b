"""Training Timer: interval workouts of work/rest sets."""

__version__ = "0.1.0"
