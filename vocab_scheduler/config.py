from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

from vocab_scheduler.sm2 import MIN_EASE

# Get the project root directory (parent of vocab_scheduler folder)
PROJECT_ROOT = Path(__file__).parent.parent


class TrackPolicy(BaseModel):
    """Scheduling constants for one track (graded or binary)"""
    initial_ease: float = Field(2.5, ge=MIN_EASE)
    initial_interval_days: int = Field(0, ge=0)
    initial_due_offset_days: int = Field(0, ge=0)  # 0 = due today, 1 = due tomorrow

    # Failures never schedule the next review sooner than this many days out
    minimum_interval_on_failure: int = Field(1, ge=0, le=1)

    # None disables automatic removal after sustained success
    mastery_exit_repetitions: Optional[int] = Field(None, ge=1)

    # Stats split: repetitions below = "learning", at or above = "mastered".
    # None means the track reports no learning/mastered split.
    mastered_threshold: Optional[int] = Field(None, ge=1)


def _graded_policy() -> TrackPolicy:
    return TrackPolicy(
        initial_interval_days=0,
        initial_due_offset_days=0,
        minimum_interval_on_failure=1,
        mastery_exit_repetitions=None,
        mastered_threshold=3,
    )


def _binary_policy() -> TrackPolicy:
    return TrackPolicy(
        initial_interval_days=1,
        initial_due_offset_days=1,
        minimum_interval_on_failure=1,
        mastery_exit_repetitions=5,
        mastered_threshold=None,
    )


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'vocab_scheduler.db'}"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "text"

    # Track policies, e.g. GRADED__MASTERY_EXIT_REPETITIONS=8
    graded: TrackPolicy = Field(default_factory=_graded_policy)
    binary: TrackPolicy = Field(default_factory=_binary_policy)

    @field_validator("graded", mode="before")
    @classmethod
    def _graded_overrides(cls, value):
        # Partial overrides keep the remaining graded defaults
        if isinstance(value, dict):
            return {**_graded_policy().model_dump(), **value}
        return value

    @field_validator("binary", mode="before")
    @classmethod
    def _binary_overrides(cls, value):
        if isinstance(value, dict):
            return {**_binary_policy().model_dump(), **value}
        return value

    def policy_for(self, track: str) -> TrackPolicy:
        if track == "graded":
            return self.graded
        if track == "binary":
            return self.binary
        raise KeyError(track)

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        env_nested_delimiter = "__"
        extra = "ignore"

settings = Settings()
