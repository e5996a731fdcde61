"""Race configuration and tuning constants."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

MIN_TABLE = 2
MAX_TABLE = 10


class PhysicsSettings(BaseModel):
    """Vehicle tuning on the 0-1 progress scale."""

    max_speed: float = Field(
        default=0.3,
        gt=0.0,
        description="Maximum velocity in progress per second (0.3 = ~3.3s per lap)",
    )
    friction: float = Field(
        default=0.985,
        gt=0.0,
        le=1.0,
        description="Velocity retained per tick (multiplicative decay)",
    )
    base_acceleration: float = Field(
        default=0.05,
        ge=0.0,
        description="Velocity added by a full-strength boost",
    )


class TimingSettings(BaseModel):
    """Problem timer and transition delays."""

    problem_duration: float = Field(
        default=6.0,
        gt=0.0,
        description="Seconds available to answer each problem",
    )
    problem_read_delay_ms: float = Field(
        default=0.0,
        ge=0.0,
        description="Delay before the timer starts on a new problem",
    )
    correct_answer_delay_ms: float = Field(
        default=500.0,
        ge=0.0,
        description="Delay between a correct answer and the next problem",
    )
    timeout_delay_ms: float = Field(
        default=160.0,
        ge=0.0,
        description="Delay between a timeout and the next problem",
    )
    post_answer_cooldown_ms: float = Field(
        default=500.0,
        ge=0.0,
        description="Recognizer cooldown after an accepted answer (trailing audio)",
    )
    new_problem_cooldown_ms: float = Field(
        default=0.0,
        ge=0.0,
        description="Recognizer cooldown when a new problem is shown",
    )


class RaceConfig(BaseModel):
    """Everything the race core needs from the menu and tuning files."""

    selected_tables: list[int] = Field(
        default_factory=lambda: [2, 3, 4, 5],
        description="Multiplication tables to practice (subset of 2-10)",
    )
    total_laps: int = Field(default=3, gt=0, description="Laps to complete")
    boost_scale: float = Field(
        default=1.0,
        ge=0.0,
        description="Boost multiplier at full remaining time",
    )
    record_spoken_mismatches: bool = Field(
        default=False,
        description="Count wrong spoken numbers as incorrect answers "
        "(off: treated as recognition noise)",
    )
    physics: PhysicsSettings = Field(default_factory=PhysicsSettings)
    timing: TimingSettings = Field(default_factory=TimingSettings)

    @field_validator("selected_tables")
    @classmethod
    def _check_tables(cls, tables: list[int]) -> list[int]:
        if not tables:
            raise ValueError("at least one multiplication table must be selected")
        for table in tables:
            if not MIN_TABLE <= table <= MAX_TABLE:
                raise ValueError(
                    f"table {table} outside supported range {MIN_TABLE}-{MAX_TABLE}"
                )
        # Order is irrelevant to generation; duplicates would skew the draw
        return sorted(set(tables))

    @classmethod
    def from_json_file(cls, path: str | Path) -> "RaceConfig":
        """Load a configuration from a JSON tuning file.

        Args:
            path: JSON file with any subset of the configuration keys

        Returns:
            Validated RaceConfig
        """
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
