# tests/test_nutrition_calc.py
from __future__ import annotations

import itertools
import math

import pytest

from core.errors import InsufficientData
from core.models.user import ActivityLevel, Biometric, Profile, Sex
from core.nutrition_calc import ACTIVITY_MULTIPLIERS, NutritionalCalculator

calc = NutritionalCalculator()

MALE_80KG = Biometric(weight_kg=80, height_cm=180)
MALE_30 = Profile(age=30, sex=Sex.male, activity_multiplier=1.5)


# ── BMR / TDEE ───────────────────────────────────────────────────────
def test_bmr_mifflin_male():
    est = calc.estimate(MALE_80KG, MALE_30)
    assert est.bmr == pytest.approx(10 * 80 + 6.25 * 180 - 5 * 30 + 5)   # 1780


def test_bmr_mifflin_female():
    est = calc.estimate(Biometric(weight_kg=60, height_cm=165), Profile(age=25, sex=Sex.female))
    assert est.bmr == pytest.approx(1345.25)


def test_tdee_explicit_multiplier():
    est = calc.estimate(MALE_80KG, MALE_30)
    assert est.tdee == pytest.approx(2670)
    assert est.notes == []


@pytest.mark.parametrize("level", list(ActivityLevel))
def test_tdee_activity_table(level):
    est = calc.estimate(MALE_80KG, Profile(age=30, sex=Sex.male, activity_level=level))
    assert math.isclose(est.tdee, 1780 * ACTIVITY_MULTIPLIERS[level], rel_tol=1e-9)


def test_table_spans_sedentary_to_extremely_active():
    assert ACTIVITY_MULTIPLIERS[ActivityLevel.sedentary] == 1.2
    assert ACTIVITY_MULTIPLIERS[ActivityLevel.extremely_active] == 1.9


# ── defaults are applied and reported ───────────────────────────────
def test_unknown_activity_defaults_to_sedentary_and_says_so():
    est = calc.estimate(MALE_80KG, Profile(age=30, sex=Sex.male))
    assert est.anthro.multiplier == 1.2
    assert any("activity level unknown" in n for n in est.notes)


def test_missing_profile_fields_are_noted():
    est = calc.estimate(Biometric(weight_kg=70))
    joined = " ".join(est.notes)
    assert "height unknown" in joined
    assert "age unknown" in joined
    assert "sex unknown" in joined
    assert est.anthro.height_cm == 170


# ── failures ────────────────────────────────────────────────────────
@pytest.mark.parametrize("bio", [None, Biometric(), Biometric(height_cm=180), Biometric(weight_kg=0)])
def test_missing_weight_is_insufficient(bio):
    with pytest.raises(InsufficientData):
        calc.estimate(bio, MALE_30)


def test_out_of_range_height_is_insufficient():
    with pytest.raises(InsufficientData):
        calc.estimate(Biometric(weight_kg=80, height_cm=30), MALE_30)


# ── property: valid inputs → BMR > 0 and TDEE ≥ BMR ─────────────────
@pytest.mark.parametrize(
    "weight,height,age,sex,level",
    list(itertools.product([20, 45, 80, 400], [100, 160, 250], [15, 50, 100], list(Sex), list(ActivityLevel))),
)
def test_bmr_positive_and_tdee_not_below_bmr(weight, height, age, sex, level):
    est = calc.estimate(
        Biometric(weight_kg=weight, height_cm=height),
        Profile(age=age, sex=sex, activity_level=level),
    )
    assert est.bmr > 0
    assert est.tdee >= est.bmr
