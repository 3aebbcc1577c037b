"""
core/target_recommender.py
────────────────────────────────────────────────────────────────────────
Turns an `EnergyEstimate` plus the user's active goal into a
`CalorieRecommendation`.

Calorie branches
----------------
* no goal / maintenance        → TDEE
* weight_loss                  → TDEE − min(goal deficit, 25 % TDEE)
* body_fat_reduction           → TDEE − min(goal deficit, 15 % TDEE)
* weight_gain / muscle_gain    → TDEE + surplus_fraction · TDEE

Protein is a g/kg multiple of current body weight. Fat is 25 % of
calories, carbs take the remainder. The reasoning text lists every
formula, input and default so the UI can show it verbatim.
"""

from __future__ import annotations

import logging
from datetime import date

from config import settings
from core.errors import InvalidGoal
from core.models.goal import Goal, GoalType
from core.models.recommendation import CalorieRecommendation
from core.nutrition_calc import EnergyEstimate

_LOG = logging.getLogger(__name__)

KCAL_PER_KG = 7700
FAT_SHARE = 0.25
AGGRESSIVE_KCAL = 500

PROTEIN_G_PER_KG: dict[GoalType | None, float] = {
    None: 1.6,
    GoalType.weight_loss: 2.0,
    GoalType.body_fat_reduction: 2.2,
    GoalType.weight_gain: 2.2,
    GoalType.muscle_gain: 2.2,
    GoalType.maintenance: 1.8,
}

DEFICIT_CAP: dict[GoalType, float] = {
    GoalType.weight_loss: 0.25,
    GoalType.body_fat_reduction: 0.15,
}

_LOSS = {GoalType.weight_loss, GoalType.body_fat_reduction}
_GAIN = {GoalType.weight_gain, GoalType.muscle_gain}


def parse_goal_type(raw: str | GoalType) -> GoalType:
    try:
        return GoalType(raw)
    except ValueError:
        raise InvalidGoal(f"unrecognised goal type {raw!r}") from None


class TargetRecommender:
    def __init__(
        self,
        calorie_floor: int | None = None,
        default_deficit_kcal: int | None = None,
        surplus_fraction: float | None = None,
    ) -> None:
        self.calorie_floor = calorie_floor if calorie_floor is not None else settings.calorie_floor
        self.default_deficit = (
            default_deficit_kcal if default_deficit_kcal is not None else settings.default_deficit_kcal
        )
        self.surplus_fraction = surplus_fraction if surplus_fraction is not None else settings.surplus_fraction

    # ─────────────────────────── public ──────────────────────────── #
    def recommend(
        self,
        est: EnergyEstimate,
        goal: Goal | None,
        today: date | None = None,
    ) -> CalorieRecommendation:
        today = today or date.today()
        gtype = parse_goal_type(goal.goal_type) if goal is not None else None
        weight = est.weight_kg
        tdee = est.tdee

        lines = [
            "Based on your current stats:",
            f"• Weight: {weight:g}kg, Height: {est.anthro.height_cm:g}cm, "
            f"Age: {est.anthro.age}, Sex: {est.anthro.sex.value}",
            f"• BMR (Mifflin-St Jeor: 10×weight + 6.25×height − 5×age "
            f"{'+ 5' if est.anthro.sex.value == 'male' else '− 161'}): {round(est.bmr)} kcal",
            f"• TDEE (BMR × {est.anthro.multiplier:g} activity multiplier): {round(tdee)} kcal",
        ]
        lines += [f"• Note: {n}" for n in est.notes]
        lines.append("")

        # --- calories -------------------------------------------------
        if gtype is None:
            lines.append("No active goal, maintenance defaults applied: calories = TDEE.")
            calories = tdee
        elif gtype in _LOSS:
            deficit = self._deficit(est, goal, gtype, today, lines)
            calories = tdee - deficit
        elif gtype in _GAIN:
            surplus = tdee * self.surplus_fraction
            lines.append(
                f"Goal: {_label(gtype)}. Calorie surplus: {round(surplus)} kcal/day "
                f"({self.surplus_fraction:.0%} of TDEE)."
            )
            calories = tdee + surplus
        else:
            lines.append("Goal: maintenance. Calories = TDEE.")
            calories = tdee

        if goal is not None and goal.daily_calorie_target:
            lines.append(f"Your goal sets an explicit calorie target of {goal.daily_calorie_target} kcal.")
            calories = float(goal.daily_calorie_target)

        calories = round(calories)
        if calories < self.calorie_floor:
            lines.append(
                f"⚠️ Calories clamped from {calories} to the {self.calorie_floor} kcal/day floor."
            )
            calories = self.calorie_floor

        # --- protein --------------------------------------------------
        per_kg = PROTEIN_G_PER_KG[gtype]
        protein = round(weight * per_kg)
        protein_src = f"{per_kg:g}g per kg × {weight:g}kg"
        if goal is not None and goal.daily_protein_target:
            protein = goal.daily_protein_target
            protein_src = "explicit goal target"

        # --- remaining macros -----------------------------------------
        fat = round(calories * FAT_SHARE / 9)
        carbs = max(0, round((calories - protein * 4 - fat * 9) / 4))

        adjustment = calories - round(tdee)
        deficit_out = surplus_out = None
        if gtype in _LOSS and adjustment < 0:
            deficit_out = -adjustment
        elif gtype in _GAIN and adjustment > 0:
            surplus_out = adjustment

        lines += [
            "",
            "Recommended daily intake:",
            f"• Calories: {calories} ({'+' if adjustment > 0 else ''}{adjustment} from maintenance)",
            f"• Protein: {protein}g ({protein_src})",
            f"• Fat: {fat}g ({FAT_SHARE:.0%} of calories)",
            f"• Carbs: {carbs}g (remaining calories)",
        ]
        if abs(adjustment) > AGGRESSIVE_KCAL:
            lines.append("⚠️ This is an aggressive target. Consider a more gradual approach.")
        if calories < est.bmr * 0.8:
            lines.append("⚠️ This calorie target is well below your BMR. Consider consulting a professional.")

        _LOG.debug("recommend goal=%s kcal=%d protein=%d", gtype, calories, protein)
        return CalorieRecommendation(
            daily_calories=calories,
            daily_protein=protein,
            daily_carbs=carbs,
            daily_fat=fat,
            reasoning="\n".join(lines),
            bmr=round(est.bmr),
            tdee=round(tdee),
            deficit=deficit_out,
            surplus=surplus_out,
        )

    # ─────────────────────────── helpers ─────────────────────────── #
    def _deficit(
        self,
        est: EnergyEstimate,
        goal: Goal,
        gtype: GoalType,
        today: date,
        lines: list[str],
    ) -> float:
        cap_pc = DEFICIT_CAP[gtype]
        cap = est.tdee * cap_pc

        if goal.target_weight_kg is not None and goal.target_date is not None:
            weeks = max(1.0, (goal.target_date - today).days / 7)
            weekly = (goal.target_weight_kg - est.weight_kg) / weeks
            implied = -weekly * KCAL_PER_KG / 7
            lines.append(
                f"Goal: {_label(gtype)} to {goal.target_weight_kg:g}kg by {goal.target_date.isoformat()} "
                f"({weekly:+.2f}kg/week × {KCAL_PER_KG} kcal/kg ÷ 7)."
            )
            if implied <= 0:
                lines.append("Target weight is not below current weight, so no calorie deficit is applied.")
                return 0.0
        else:
            implied = float(self.default_deficit)
            lines.append(f"Goal: {_label(gtype)} with the default moderate deficit of {self.default_deficit} kcal/day.")

        deficit = min(implied, cap)
        if implied > cap:
            lines.append(
                f"Calorie deficit: {round(deficit)} kcal/day "
                f"(capped at {cap_pc:.0%} of TDEE from {round(implied)})."
            )
        else:
            lines.append(f"Calorie deficit: {round(deficit)} kcal/day.")
        return deficit


def _label(g: GoalType) -> str:
    return g.value.replace("_", " ")
