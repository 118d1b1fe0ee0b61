"""Data models for weight tracking and weekly analytics."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

VALID_SEXES = ("Male", "Female")


@dataclass
class Profile:
    """Body attributes used by the energy calculations."""

    profile_id: Optional[int]
    height_cm: float
    date_of_birth: date
    sex: str  # 'Male' or 'Female'
    activity_level: int  # 0-4, see ACTIVITY_FACTORS
    role: str = "user"
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.sex not in VALID_SEXES:
            raise ValueError(f"sex must be one of {VALID_SEXES}, got '{self.sex}'")


@dataclass
class WeightLogEntry:
    """A single timestamped weight/body-fat measurement."""

    entry_id: Optional[int]
    profile_id: Optional[int]
    entry_at: datetime
    weight_kg: float
    body_fat_pct: Optional[float] = None

    def __post_init__(self) -> None:
        # Week windows are naive local dates
        if self.entry_at.tzinfo is not None:
            raise ValueError("entry time must not carry a UTC offset")
        if self.weight_kg <= 0:
            raise ValueError(f"weight must be positive, got {self.weight_kg}")
        if self.body_fat_pct is not None and not 0 <= self.body_fat_pct < 100:
            raise ValueError(
                f"body fat must be in [0, 100), got {self.body_fat_pct}"
            )

    @property
    def lean_mass_kg(self) -> Optional[float]:
        """Weight minus fat mass, or None without a body-fat reading."""
        if self.body_fat_pct is None:
            return None
        return self.weight_kg * (1 - self.body_fat_pct / 100)


@dataclass
class DietPhase:
    """Named macro policy row owned by a profile."""

    phase_id: Optional[int]
    profile_id: Optional[int]
    phase_key: str
    protein_per_kg_lean: float
    fat_per_kg_body: float
    calorie_offset: int


@dataclass
class AnalyticsWeek:
    """Stored per-week policy choices. Metrics are never persisted."""

    week_id: Optional[int]
    profile_id: int
    week_start: date
    week_number: int
    workout: bool
    phase_id: int
    display_width: Optional[int] = None
