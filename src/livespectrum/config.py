"""
Visualizer configuration.

All values are startup constants. They are exposed as a validated model so that
tests and the command line can build variants.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_TRANSFORM_SIZE = 2048
DEFAULT_SMOOTHING = 0.7
DEFAULT_MIN_LEVEL_DB = -90.0
DEFAULT_MAX_LEVEL_DB = -10.0
DEFAULT_MAX_DISPLAY_FREQUENCY = 16000.0

# Display defaults
DEFAULT_SURFACE_WIDTH = 860
DEFAULT_SURFACE_HEIGHT = 320
DEFAULT_FRAME_RATE = 60
DEFAULT_BLOCK_SIZE = 1024


class VisualizerConfig(BaseModel):
    """Immutable analysis and display settings for one session."""

    model_config = ConfigDict(frozen=True)

    transform_size: int = Field(
        default=DEFAULT_TRANSFORM_SIZE, ge=32, description="FFT window length (power of two)"
    )
    smoothing_factor: float = Field(
        default=DEFAULT_SMOOTHING, ge=0, lt=1, description="Weight of the previous frame"
    )
    min_level_db: float = Field(default=DEFAULT_MIN_LEVEL_DB, description="Floor of the dB range")
    max_level_db: float = Field(default=DEFAULT_MAX_LEVEL_DB, description="Ceiling of the dB range")
    max_display_frequency_hz: float = Field(
        default=DEFAULT_MAX_DISPLAY_FREQUENCY, gt=0, description="Upper edge of the chart"
    )

    @field_validator("transform_size")
    @classmethod
    def _power_of_two(cls, value: int) -> int:
        if value & (value - 1):
            raise ValueError(f"transform_size must be a power of two, got {value}")
        return value

    @model_validator(mode="after")
    def _level_range(self) -> "VisualizerConfig":
        if self.min_level_db >= self.max_level_db:
            raise ValueError(
                f"min_level_db ({self.min_level_db}) must be below "
                f"max_level_db ({self.max_level_db})"
            )
        return self

    @property
    def bin_count(self) -> int:
        """Number of magnitude bins per frame."""
        return self.transform_size // 2
