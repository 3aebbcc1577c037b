"""
core/nutrition_calc.py
────────────────────────────────────────────────────────────────────────
Energy expenditure estimator:

1. BMR  (Mifflin–St Jeor)
2. TDEE (activity multiplier from a fixed table)

Every default that had to be filled in is recorded in `EnergyEstimate.notes`
so the recommender can repeat it to the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from core.errors import InsufficientData
from core.models.user import ActivityLevel, Biometric, Profile, Sex

_LOG = logging.getLogger(__name__)

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.sedentary: 1.2,
    ActivityLevel.lightly_active: 1.375,
    ActivityLevel.moderately_active: 1.55,
    ActivityLevel.very_active: 1.725,
    ActivityLevel.extremely_active: 1.9,
}

DEFAULT_MULTIPLIER = 1.2
DEFAULT_HEIGHT_CM = 170.0
DEFAULT_AGE = 30
DEFAULT_SEX = Sex.male

WEIGHT_RANGE = (20.0, 400.0)
HEIGHT_RANGE = (100.0, 250.0)


# ──────────────────────────────────────────────────────────────────────
#  Resolved inputs
# ──────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Anthro:
    weight_kg: float
    height_cm: float
    age: int
    sex: Sex
    multiplier: float


@dataclass(frozen=True)
class EnergyEstimate:
    bmr: float
    tdee: float
    anthro: Anthro
    notes: list[str] = field(default_factory=list)

    @property
    def weight_kg(self) -> float:
        return self.anthro.weight_kg


# ──────────────────────────────────────────────────────────────────────
#  Calculator
# ──────────────────────────────────────────────────────────────────────
class NutritionalCalculator:
    """Source-of-truth for BMR and TDEE."""

    # --------------- public entrypoint --------------------------------
    def estimate(self, bio: Biometric | None, profile: Profile | None = None) -> EnergyEstimate:
        anthro, notes = self.resolve(bio, profile or Profile())
        bmr = self.bmr(anthro)
        tdee = self.tdee(anthro)
        _LOG.debug("estimate bmr=%.1f tdee=%.1f pal=%.3f", bmr, tdee, anthro.multiplier)
        return EnergyEstimate(bmr=bmr, tdee=tdee, anthro=anthro, notes=notes)

    # --------------- BMR / TDEE -------------------------------------
    def bmr(self, a: Anthro) -> float:
        base = 10 * a.weight_kg + 6.25 * a.height_cm - 5 * a.age
        return base + (5 if a.sex == Sex.male else -161)

    def tdee(self, a: Anthro) -> float:
        return self.bmr(a) * a.multiplier

    # --------------- input resolution -------------------------------
    def resolve(self, bio: Biometric | None, p: Profile) -> tuple[Anthro, list[str]]:
        """Validate the reading and fill documented defaults."""
        notes: list[str] = []

        weight = bio.weight_kg if bio else None
        if weight is None or weight <= 0:
            raise InsufficientData("a recorded weight is required to estimate energy needs")
        if not WEIGHT_RANGE[0] <= weight <= WEIGHT_RANGE[1]:
            raise InsufficientData(f"weight {weight}kg is outside {WEIGHT_RANGE[0]:.0f}-{WEIGHT_RANGE[1]:.0f}kg")

        height = bio.height_cm
        if height is None:
            height = DEFAULT_HEIGHT_CM
            notes.append(f"height unknown, assumed {DEFAULT_HEIGHT_CM:.0f}cm")
        elif not HEIGHT_RANGE[0] <= height <= HEIGHT_RANGE[1]:
            raise InsufficientData(f"height {height}cm is outside {HEIGHT_RANGE[0]:.0f}-{HEIGHT_RANGE[1]:.0f}cm")

        age = p.age
        if age is None:
            age = DEFAULT_AGE
            notes.append(f"age unknown, assumed {DEFAULT_AGE}")

        sex = p.sex
        if sex is None:
            sex = DEFAULT_SEX
            notes.append(f"sex unknown, assumed {DEFAULT_SEX.value}")

        if p.activity_multiplier is not None:
            pal = p.activity_multiplier
        elif p.activity_level is not None:
            pal = ACTIVITY_MULTIPLIERS[p.activity_level]
        else:
            pal = DEFAULT_MULTIPLIER
            notes.append(f"activity level unknown, default multiplier {DEFAULT_MULTIPLIER} applied")

        return Anthro(weight, height, age, sex, pal), notes
