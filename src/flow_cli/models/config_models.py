"""Configuration models for Flow CLI.

Each methodology carries its own block of duration presets and break
lengths. An empty preset list means "use the built-in defaults" of the
methodology provider.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

MethodologyId = Literal["pomodoro", "deepwork", "maketime"]

MAX_PRESETS = 3


class PresetConfig(BaseModel):
    """A named duration preset shown in the duration picker."""

    name: str = Field(..., min_length=1)
    minutes: int = Field(..., gt=0, le=600)


class _PresetList(BaseModel):
    presets: list[PresetConfig] = Field(default_factory=list)

    @field_validator("presets")
    @classmethod
    def validate_presets(cls, v: list[PresetConfig]) -> list[PresetConfig]:
        """At most three presets fit the numeric shortcuts 1-3."""
        if len(v) > MAX_PRESETS:
            raise ValueError(f"At most {MAX_PRESETS} presets are supported")
        return v


class PomodoroConfig(_PresetList):
    """Pomodoro methodology settings."""

    short_break_minutes: int = Field(default=5, gt=0)
    long_break_minutes: int = Field(default=15, gt=0)
    sessions_before_long: int = Field(default=4, ge=1)
    auto_break: bool = Field(default=False)


class DeepWorkConfig(_PresetList):
    """Deep Work methodology settings."""

    break_minutes: int = Field(default=15, gt=0)
    goal_hours: float = Field(default=4.0, gt=0)


class MakeTimeConfig(_PresetList):
    """Make Time methodology settings."""

    break_minutes: int = Field(default=10, gt=0)


class NotificationsConfig(BaseModel):
    """Desktop notification settings."""

    enabled: bool = Field(default=True)


class UIConfig(BaseModel):
    """UI configuration."""

    inline: bool = Field(default=False)


class AppConfig(BaseModel):
    """Main application configuration."""

    methodology: MethodologyId = Field(default="pomodoro")
    first_run: bool = Field(default=True)
    pomodoro: PomodoroConfig = Field(default_factory=PomodoroConfig)
    deepwork: DeepWorkConfig = Field(default_factory=DeepWorkConfig)
    maketime: MakeTimeConfig = Field(default_factory=MakeTimeConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    ui: UIConfig = Field(default_factory=UIConfig)

    def break_minutes(
        self, methodology: MethodologyId, long_break: bool = False
    ) -> int:
        """Return the break length configured for a methodology."""
        if methodology == "deepwork":
            return self.deepwork.break_minutes
        if methodology == "maketime":
            return self.maketime.break_minutes
        if long_break:
            return self.pomodoro.long_break_minutes
        return self.pomodoro.short_break_minutes
