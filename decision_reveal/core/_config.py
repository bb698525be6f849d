from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Class to store all the settings of the application.

    Every value can be overridden with an environment variable prefixed with
    ``DECISION_REVEAL_`` or from a ``.env`` file.
    """

    BUILD_TICK_SECONDS: float = Field(default=0.4, ge=0)
    BUILD_GRACE_SECONDS: float = Field(default=2.0, ge=0)
    PATH_TICK_SECONDS: float = Field(default=0.6, ge=0)
    LABEL_DELAY_SECONDS: float = Field(default=0.5, ge=0)
    RECONSTRUCT_TICK_SECONDS: float = Field(default=0.2, ge=0)
    RECONSTRUCT_CLEAR_SECONDS: float = Field(default=2.0, ge=0)
    TRAIN_CLEAR_SECONDS: float = Field(default=3.0, ge=0)
    THRESHOLD_TOLERANCE: float = Field(default=1e-4, gt=0)
    PACING_INDEX: Literal["preorder", "heap"] = "preorder"

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_prefix="DECISION_REVEAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()  # type: ignore
