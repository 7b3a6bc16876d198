"""Calorie and macro recommendations backed by a structured-output LLM."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from calorie_planner.domain.ai import (
    CalorieRecommendationInput,
    CalorieRecommendationOutput,
    ExplanationStep,
    MacroDistribution,
    MacroExplanation,
    RecommendationExplanation,
)

_logger = logging.getLogger(__name__)

KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_CARBS = 4
KCAL_PER_GRAM_FAT = 9
FAT_SHARE = 0.25
CALORIE_TOLERANCE = 5.0
FAT_SHARE_TOLERANCE = 0.01

ACTIVITY_FACTORS: dict[str, float] = {
    "sedentary": 1.2,
    "lightlyActive": 1.375,
    "moderatelyActive": 1.55,
    "veryActive": 1.725,
    "extraActive": 1.9,
}
GOAL_ADJUSTMENTS: dict[str, int] = {
    "loseWeight": -500,
    "maintainWeight": 0,
    "gainMuscle": 400,
}
PROTEIN_PER_KG: dict[str, float] = {
    "loseWeight": 1.8,
    "maintainWeight": 1.6,
    "gainMuscle": 2.0,
}

_STEP_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "description": {"type": "string"},
        "formula": {"type": "string"},
        "calculation": {"type": "string"},
        "value": {"type": "number"},
    },
    "required": ["description", "formula", "calculation", "value"],
    "additionalProperties": False,
}

_MACRO_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "description": {"type": "string"},
        "calculation": {"type": "string"},
        "value": {"type": "number"},
    },
    "required": ["description", "calculation", "value"],
    "additionalProperties": False,
}

RECOMMENDATION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "recommendedCalories": {"type": "number"},
        "recommendedProtein": {"type": "number"},
        "recommendedCarbs": {"type": "number"},
        "recommendedFats": {"type": "number"},
        "explanation": {
            "type": "object",
            "properties": {
                "basalMetabolicRate": _STEP_SCHEMA,
                "totalDailyEnergyExpenditure": _STEP_SCHEMA,
                "calorieGoal": _STEP_SCHEMA,
                "macronutrientDistribution": {
                    "type": "object",
                    "properties": {
                        "protein": _MACRO_SCHEMA,
                        "fats": _MACRO_SCHEMA,
                        "carbs": _MACRO_SCHEMA,
                    },
                    "required": ["protein", "fats", "carbs"],
                    "additionalProperties": False,
                },
                "summary": {"type": "string"},
                "practicalTips": {"type": "array", "items": {"type": "string"}},
            },
            "required": [
                "basalMetabolicRate",
                "totalDailyEnergyExpenditure",
                "calorieGoal",
                "macronutrientDistribution",
                "summary",
                "practicalTips",
            ],
            "additionalProperties": False,
        },
    },
    "required": [
        "recommendedCalories",
        "recommendedProtein",
        "recommendedCarbs",
        "recommendedFats",
        "explanation",
    ],
    "additionalProperties": False,
}

_INSTRUCTIONS = """You are an expert personal trainer and nutritionist.
Recommend a daily calorie intake and macronutrient split in grams.

Follow these rules exactly:
1. Basal metabolic rate with Mifflin-St Jeor:
   men: 10 x weight(kg) + 6.25 x height(cm) - 5 x age + 5
   women: 10 x weight(kg) + 6.25 x height(cm) - 5 x age - 161
2. Total daily energy expenditure: BMR x activity factor
   (sedentary 1.2, lightlyActive 1.375, moderatelyActive 1.55,
   veryActive 1.725, extraActive 1.9).
3. Goal adjustment: loseWeight -500 kcal, maintainWeight none,
   gainMuscle +400 kcal.
4. Protein first: 1.8 g/kg for loseWeight, 2.0 g/kg for gainMuscle,
   1.6 g/kg for maintainWeight (1 g = 4 kcal).
5. Fats second: exactly 25% of total calories (1 g = 9 kcal).
6. Carbs last: remaining calories (1 g = 4 kcal). Absorb any rounding
   difference in carbs so protein, fat and carb calories add up to the
   recommended calories.

Fill the explanation object step by step and give at least four
practical tips."""


class RecommendationError(RuntimeError):
    """Raised when a recommendation response is unusable."""


class StructuredCompletionClient(Protocol):
    """Interface for LLM calls that return schema-constrained JSON."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema_name: str,
        schema: dict[str, object],
        instructions: str,
        prompt: str,
    ) -> dict[str, object]:
        """Return parsed JSON matching the schema."""


@dataclass
class RecommendationService:
    """Service that requests and validates calorie recommendations."""

    client: StructuredCompletionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def recommend(
        self, data: CalorieRecommendationInput
    ) -> CalorieRecommendationOutput:
        """Ask the model for a recommendation and check its macro math."""
        try:
            reference = calculate_targets(data)
        except ValidationError as exc:
            raise RecommendationError(
                "These measurements do not give a usable calorie target"
            ) from exc
        raw = await self.client.complete(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            schema_name="calorie_recommendation",
            schema=RECOMMENDATION_SCHEMA,
            instructions=_INSTRUCTIONS,
            prompt=_format_prompt(data, reference),
        )
        try:
            result = CalorieRecommendationOutput.model_validate(raw)
        except ValidationError as exc:
            raise RecommendationError(
                "Recommendation did not match the expected schema"
            ) from exc
        check_macro_consistency(result)
        _logger.info(
            "Recommendation accepted: %.0f kcal", result.recommended_calories
        )
        return result


def _format_prompt(
    data: CalorieRecommendationInput, reference: CalorieRecommendationOutput
) -> str:
    return (
        f"Age: {data.age}\n"
        f"Weight: {data.weight} kg\n"
        f"Height: {data.height} cm\n"
        f"Gender: {data.gender}\n"
        f"Activity level: {data.activity_level}\n"
        f"Goal: {data.goal}\n"
        "Reference targets from the rules above: "
        f"{reference.recommended_calories:.0f} kcal, "
        f"{reference.recommended_protein:.1f} g protein, "
        f"{reference.recommended_carbs:.1f} g carbs, "
        f"{reference.recommended_fats:.1f} g fats"
    )


def check_macro_consistency(result: CalorieRecommendationOutput) -> None:
    """Reject results whose macro calories disagree with the calorie total."""
    calories = result.recommended_calories
    fat_kcal = result.recommended_fats * KCAL_PER_GRAM_FAT
    macro_kcal = (
        result.recommended_protein * KCAL_PER_GRAM_PROTEIN
        + result.recommended_carbs * KCAL_PER_GRAM_CARBS
        + fat_kcal
    )
    if abs(macro_kcal - calories) > CALORIE_TOLERANCE:
        raise RecommendationError(
            f"Macro calories {macro_kcal:.1f} do not match {calories:.1f}"
        )
    if abs(fat_kcal - calories * FAT_SHARE) > calories * FAT_SHARE_TOLERANCE:
        raise RecommendationError("Fat calories are not 25% of the total")


def basal_metabolic_rate(data: CalorieRecommendationInput) -> float:
    """Return Mifflin-St Jeor BMR in kcal."""
    base = 10 * data.weight + 6.25 * data.height - 5 * data.age
    return base + 5 if data.gender == "male" else base - 161


def calculate_targets(data: CalorieRecommendationInput) -> CalorieRecommendationOutput:
    """Compute a recommendation with the same rules the model is given."""
    bmr = basal_metabolic_rate(data)
    factor = ACTIVITY_FACTORS[data.activity_level]
    tdee = bmr * factor
    adjustment = GOAL_ADJUSTMENTS[data.goal]
    calories = round(tdee + adjustment)
    protein = round(PROTEIN_PER_KG[data.goal] * data.weight, 1)
    fats = round(calories * FAT_SHARE / KCAL_PER_GRAM_FAT, 1)
    remaining = calories - protein * KCAL_PER_GRAM_PROTEIN - fats * KCAL_PER_GRAM_FAT
    carbs = round(max(remaining, 0.0) / KCAL_PER_GRAM_CARBS, 1)
    gender_term = "+ 5" if data.gender == "male" else "- 161"
    explanation = RecommendationExplanation(
        basal_metabolic_rate=ExplanationStep(
            description="Energy your body uses at rest.",
            formula=f"10 x weight + 6.25 x height - 5 x age {gender_term}",
            calculation=(
                f"10 x {data.weight} + 6.25 x {data.height} - 5 x {data.age} "
                f"{gender_term}"
            ),
            value=round(bmr, 1),
        ),
        total_daily_energy_expenditure=ExplanationStep(
            description="BMR adjusted for your activity level.",
            formula="BMR x activity factor",
            calculation=f"{bmr:.1f} x {factor}",
            value=round(tdee, 1),
        ),
        calorie_goal=ExplanationStep(
            description="Daily energy adjusted for your goal.",
            formula="TDEE + goal adjustment",
            calculation=f"{tdee:.1f} {adjustment:+d}",
            value=calories,
        ),
        macronutrient_distribution=MacroDistribution(
            protein=MacroExplanation(
                description="Protein is set from body weight.",
                calculation=f"{PROTEIN_PER_KG[data.goal]} g/kg x {data.weight} kg",
                value=protein,
            ),
            fats=MacroExplanation(
                description="Fats cover 25% of calories.",
                calculation=f"{calories} x 0.25 / 9",
                value=fats,
            ),
            carbs=MacroExplanation(
                description="Carbs take the remaining calories.",
                calculation=f"({calories} - {protein} x 4 - {fats} x 9) / 4",
                value=carbs,
            ),
        ),
        summary=(
            f"Aim for {calories} kcal with {protein} g protein, "
            f"{carbs} g carbs and {fats} g fats."
        ),
        practical_tips=[
            "Spread protein evenly across your meals.",
            "Prefer whole grains and fruit for carbohydrates.",
            "Weigh portions for the first few weeks.",
            "Review your weight weekly and adjust calories gradually.",
        ],
    )
    return CalorieRecommendationOutput(
        recommended_calories=calories,
        recommended_protein=protein,
        recommended_carbs=carbs,
        recommended_fats=fats,
        explanation=explanation,
    )
