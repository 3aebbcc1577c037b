"""
core/nutrition_summary.py
────────────────────────────────────────────────────────────────────────
Daily totals and progress against an accepted target, plus the short
text summaries shown on the dashboard and handed to the assistant.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from core.models.meal import FoodItem

# (progress key, meal column, target column, unit)
_MACROS = (
    ("calories", "kcal_total", "calories_target", "kcal"),
    ("protein", "g_protein", "protein_target", "g"),
    ("carbs", "g_carb", "carbs_target", "g"),
    ("fat", "g_fat", "fat_target", "g"),
)


@dataclass(frozen=True)
class MacroProgress:
    consumed: float
    target: float | None
    percent: float | None
    over: bool


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def sum_items(items: Iterable[FoodItem]) -> dict[str, float]:
    """Meal totals from its items, missing values counted as zero."""
    tot = {"kcal_total": 0.0, "g_protein": 0.0, "g_carb": 0.0, "g_fat": 0.0}
    for it in items:
        n = it.nutrition
        tot["kcal_total"] += n.kcal or 0
        tot["g_protein"] += n.g_protein or 0
        tot["g_carb"] += n.g_carb or 0
        tot["g_fat"] += n.g_fat or 0
    return {k: round(v, 1) for k, v in tot.items()}


def daily_totals(meals: Iterable[Any]) -> dict[str, float]:
    """Sum logged meals only; planned meals do not count toward the day."""
    totals = {key: 0.0 for key, *_ in _MACROS}
    for m in meals:
        if (_get(m, "status") or "logged") != "logged":
            continue
        for key, col, _, _ in _MACROS:
            totals[key] += float(_get(m, col) or 0)
    return totals


def progress(meals: Iterable[Any], target: Any | None) -> dict[str, MacroProgress]:
    totals = daily_totals(meals)
    out: dict[str, MacroProgress] = {}
    for key, _, tcol, _ in _MACROS:
        tgt = _get(target, tcol) if target is not None else None
        consumed = totals[key]
        if tgt:
            out[key] = MacroProgress(consumed, float(tgt), round(consumed / tgt * 100, 1), consumed > tgt)
        else:
            out[key] = MacroProgress(consumed, None, None, False)
    return out


def progress_line(prog: Mapping[str, MacroProgress]) -> str:
    parts = []
    for key, _, _, unit in _MACROS:
        p = prog[key]
        if p.target is None:
            parts.append(f"{key} {p.consumed:g}{unit}")
        else:
            parts.append(f"{key} {p.consumed:g}/{p.target:g}{unit}")
    return ", ".join(parts)


def build_context_summary(preferences: Iterable[Any], meals: Iterable[Any]) -> str:
    prefs = list(preferences)
    meals = list(meals)
    if prefs:
        chunks = []
        for p in prefs:
            notes = _get(p, "notes")
            chunks.append(f"{_get(p, 'type')}: {_get(p, 'food_name')}" + (f" ({notes})" if notes else ""))
        pref_txt = "User preferences: " + ", ".join(chunks)
    else:
        pref_txt = "No dietary preferences set."

    if meals:
        meal_txt = "Today's meals: " + ", ".join(
            f"{_get(m, 'meal_type') or 'snack'}: {_get(m, 'meal_name') or 'Unnamed'} ({_get(m, 'status') or 'logged'})"
            for m in meals
        )
    else:
        meal_txt = "No meals logged today."
    return f"{pref_txt}\n{meal_txt}"
