"""Models for AI recommendation and meal-plan contracts."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Gender = Literal["male", "female"]
ActivityLevel = Literal[
    "sedentary", "lightlyActive", "moderatelyActive", "veryActive", "extraActive"
]
FitnessGoal = Literal["loseWeight", "maintainWeight", "gainMuscle"]


class CalorieRecommendationInput(BaseModel):
    """Personal data used to recommend daily calories and macros."""

    age: int = Field(default=25, gt=0, le=120)
    weight: float = Field(default=70.0, gt=0, allow_inf_nan=False)
    height: float = Field(default=175.0, gt=0, allow_inf_nan=False)
    gender: Gender = "male"
    activity_level: ActivityLevel = Field(
        default="lightlyActive", alias="activityLevel"
    )
    goal: FitnessGoal = "maintainWeight"

    model_config = ConfigDict(populate_by_name=True)


class ExplanationStep(BaseModel):
    """One calculation step with its formula and resulting value."""

    description: str
    formula: str
    calculation: str
    value: float

    model_config = ConfigDict(extra="forbid")


class MacroExplanation(BaseModel):
    """Explanation for one macronutrient target."""

    description: str
    calculation: str
    value: float

    model_config = ConfigDict(extra="forbid")


class MacroDistribution(BaseModel):
    """Explanation of how calories are split across macros."""

    protein: MacroExplanation
    fats: MacroExplanation
    carbs: MacroExplanation

    model_config = ConfigDict(extra="forbid")


class RecommendationExplanation(BaseModel):
    """Structured explanation returned with a recommendation."""

    basal_metabolic_rate: ExplanationStep = Field(alias="basalMetabolicRate")
    total_daily_energy_expenditure: ExplanationStep = Field(
        alias="totalDailyEnergyExpenditure"
    )
    calorie_goal: ExplanationStep = Field(alias="calorieGoal")
    macronutrient_distribution: MacroDistribution = Field(
        alias="macronutrientDistribution"
    )
    summary: str
    practical_tips: list[str] = Field(alias="practicalTips")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class CalorieRecommendationOutput(BaseModel):
    """Recommended daily intake returned by the model."""

    recommended_calories: float = Field(
        alias="recommendedCalories", gt=0, allow_inf_nan=False
    )
    recommended_protein: float = Field(
        alias="recommendedProtein", ge=0, allow_inf_nan=False
    )
    recommended_carbs: float = Field(
        alias="recommendedCarbs", ge=0, allow_inf_nan=False
    )
    recommended_fats: float = Field(
        alias="recommendedFats", ge=0, allow_inf_nan=False
    )
    explanation: RecommendationExplanation

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class GeneratedMealEntry(BaseModel):
    """Reference to a supplied food or custom meal with a quantity."""

    source: Literal["food", "custom_meal"]
    ref_id: str
    quantity: float = Field(gt=0, allow_inf_nan=False)

    model_config = ConfigDict(extra="forbid")


class GeneratedMeal(BaseModel):
    """One generated meal slot."""

    name: Literal["Breakfast", "Lunch", "Dinner", "Snacks"]
    items: list[GeneratedMealEntry]

    model_config = ConfigDict(extra="forbid")


class GeneratedMealPlan(BaseModel):
    """Structured output for meal plan generation."""

    meals: list[GeneratedMeal]

    model_config = ConfigDict(extra="forbid")
