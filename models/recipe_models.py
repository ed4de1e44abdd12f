"""
Recipe-related data models for the TastyTray application.

Every recipe provider is normalized into these shapes by the recipe service.
Recipes are never persisted as a whole; favorites and meal-plan rows copy the
few fields they need.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Difficulty(Enum):
    """Recipe difficulty levels"""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def from_cook_time(cls, minutes: int) -> 'Difficulty':
        """Derive difficulty from total ready time"""
        if minutes > 60:
            return cls.HARD
        if minutes > 30:
            return cls.MEDIUM
        return cls.EASY


@dataclass
class NutritionData:
    """Nutritional information per serving (may be synthesized)"""
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    fiber: float = 0
    sugar: float = 0
    sodium: float = 0


@dataclass
class RecipeStep:
    """Single numbered instruction"""
    num: int
    instruction: str


@dataclass
class RecipeIngredient:
    """Ingredient line of a recipe with its amount for the recipe's own servings"""
    id: str
    name: str
    amount: float = 1.0
    unit: str = ""
    image: Optional[str] = None

    def get_display_text(self) -> str:
        """Format ingredient for display in a recipe card"""
        amount_str = f"{self.amount:g}" if self.amount else ""
        return " ".join(part for part in (amount_str, self.unit, self.name) if part)


@dataclass
class Recipe:
    """
    Normalized recipe record.

    ``id`` is source-qualified (``spoonacular-123``, ``mealdb-52772``) so that
    records from different providers never collide.
    """
    id: str
    name: str
    image: str = ""
    servings: int = 1
    cook_time: int = 0
    description: str = ""
    steps: List[RecipeStep] = field(default_factory=list)
    ingredients: List[RecipeIngredient] = field(default_factory=list)
    nutrition: NutritionData = field(default_factory=NutritionData)
    cuisines: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    difficulty: Difficulty = Difficulty.MEDIUM
    rating: Optional[float] = None
    source: str = ""

    def __post_init__(self):
        if isinstance(self.difficulty, str):
            self.difficulty = Difficulty(self.difficulty.lower())

    @property
    def effective_servings(self) -> int:
        """Serving count safe to divide by"""
        return self.servings if self.servings and self.servings > 0 else 1

    def has_ingredients(self) -> bool:
        return len(self.ingredients) > 0


@dataclass
class SearchOptions:
    """Recipe search query and filters"""
    query: str = ""
    cuisine: List[str] = field(default_factory=list)
    diet: List[str] = field(default_factory=list)
    allergies: List[str] = field(default_factory=list)
    max_time: Optional[int] = None
    include_ingredients: List[str] = field(default_factory=list)
    exclude_ingredients: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.query = (self.query or "").strip()

    def has_filters(self) -> bool:
        """Check if any structured filter is set"""
        return bool(
            self.cuisine or self.diet or self.allergies or self.max_time
            or self.include_ingredients or self.exclude_ingredients
        )

    def is_empty(self) -> bool:
        return not self.query and not self.has_filters()
