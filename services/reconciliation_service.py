"""
Ingredient reconciliation for TastyTray application.

When a recipe is added to the meal plan, each of its ingredients is routed
either to the pantry ("I have this") or to the shopping list ("I need this"),
with shopping quantities scaled from the recipe's servings to the planned
servings.

Matching against the pantry is a symmetric, case-insensitive substring test:
"tomato" matches "tomato sauce" and vice versa. It is deliberately loose and
has false positives ("egg" matches "eggplant"); the user can override every
default before saving.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from models import PantryItem, Recipe, RecipeIngredient
from utils import get_logger, log_operation
from .database_service import BackendStore
from .errors import ReconciliationError, StoreError

logger = get_logger(__name__)

# Parsed "ingredients" containing these are usually stray instruction text
INSTRUCTION_KEYWORDS = (
    'preheat', 'heat oven', 'mix', 'cook', 'bake', 'step',
    'then', 'meanwhile', 'serve', 'garnish',
)
MAX_INGREDIENT_NAME_LENGTH = 100


def is_instruction_text(name: Optional[str]) -> bool:
    """True when an ingredient name looks like a mis-parsed instruction"""
    if not name or not name.strip():
        return True
    if len(name) > MAX_INGREDIENT_NAME_LENGTH:
        return True
    lowered = name.lower()
    return any(keyword in lowered for keyword in INSTRUCTION_KEYWORDS)


def filter_reconcilable_ingredients(ingredients: Iterable[RecipeIngredient]) -> List[RecipeIngredient]:
    return [ing for ing in ingredients if not is_instruction_text(ing.name)]


def matches_pantry(name: str, pantry_items: Iterable[PantryItem]) -> bool:
    """Whether any pantry name contains ``name`` or is contained by it"""
    needle = (name or "").strip().lower()
    if not needle:
        return False
    for item in pantry_items:
        owned = (item.ingredient_name or "").strip().lower()
        if owned and (owned in needle or needle in owned):
            return True
    return False


def scale_quantity(amount: Optional[float], planned_servings: Optional[float],
                   recipe_servings: Optional[float]) -> float:
    """
    Scale an ingredient amount from recipe servings to planned servings.

    Missing or non-positive servings on either side count as 1.
    """
    planned = planned_servings if planned_servings and planned_servings > 0 else 1
    base = recipe_servings if recipe_servings and recipe_servings > 0 else 1
    return float(amount or 0) * (planned / base)


@dataclass
class ReconciliationEntry:
    """One ingredient row in the reconciliation form"""
    ingredient: RecipeIngredient
    in_pantry: bool
    have_it: bool
    quantity: float

    @property
    def name(self) -> str:
        return self.ingredient.name

    @property
    def unit(self) -> str:
        return self.ingredient.unit or ""


@dataclass
class ReconciliationPlan:
    """Per-ingredient pantry/shopping decisions for one planned recipe"""
    recipe: Recipe
    planned_servings: int
    entries: List[ReconciliationEntry] = field(default_factory=list)

    def set_choice(self, index: int, have_it: bool):
        """Set the choice for the entry at ``index``; provider ids may repeat"""
        if not 0 <= index < len(self.entries):
            raise IndexError(f"No ingredient at position {index}")
        self.entries[index].have_it = have_it

    @property
    def pantry_entries(self) -> List[ReconciliationEntry]:
        return [e for e in self.entries if e.have_it]

    @property
    def shopping_entries(self) -> List[ReconciliationEntry]:
        return [e for e in self.entries if not e.have_it]

    def commit(self, store: BackendStore, user_id: str) -> int:
        """
        Write every decision as its own insert, in order.

        There is no rollback: if an insert fails, the rows already written
        stay and ReconciliationError reports how many there were. Retrying
        writes all entries again.
        """
        committed = 0
        with log_operation(logger, f"reconcile {self.recipe.id} ({len(self.entries)} ingredients)"):
            for entry in self.entries:
                try:
                    if entry.have_it:
                        store.insert('pantry_items', {
                            'user_id': user_id,
                            'ingredient_name': entry.name,
                            'quantity': None,
                            'unit': entry.unit or None,
                            'expiry_date': None,
                        })
                    else:
                        store.insert('shopping_list', {
                            'user_id': user_id,
                            'ingredient_name': entry.name,
                            'quantity': entry.quantity,
                            'unit': entry.unit or None,
                            'is_completed': False,
                        })
                except StoreError as e:
                    raise ReconciliationError(
                        f"Failed to save ingredient choices ({committed} of {len(self.entries)} saved): {e.message}",
                        committed
                    ) from e
                committed += 1
        return committed


def build_reconciliation(recipe: Recipe, planned_servings: int,
                         pantry_items: Iterable[PantryItem]) -> ReconciliationPlan:
    """Default each ingredient to "have it" when it matches the pantry snapshot"""
    pantry_items = list(pantry_items)
    entries = []
    for ingredient in filter_reconcilable_ingredients(recipe.ingredients):
        in_pantry = matches_pantry(ingredient.name, pantry_items)
        entries.append(ReconciliationEntry(
            ingredient=ingredient,
            in_pantry=in_pantry,
            have_it=in_pantry,
            quantity=scale_quantity(ingredient.amount, planned_servings, recipe.servings)
        ))
    return ReconciliationPlan(recipe=recipe, planned_servings=planned_servings, entries=entries)


class ReconciliationService:
    """Opens reconciliation plans against a fresh pantry read and commits them"""

    def __init__(self, store: BackendStore):
        self.store = store

    def open_plan(self, user_id: str, recipe: Recipe, planned_servings: int) -> ReconciliationPlan:
        rows = self.store.select('pantry_items', [('user_id', 'eq', user_id)],
                                 order_by=[('ingredient_name', True)])
        pantry = [PantryItem.from_row(r) for r in rows]
        plan = build_reconciliation(recipe, planned_servings, pantry)
        logger.info(f"Reconciling {len(plan.entries)} of {len(recipe.ingredients)} ingredients "
                    f"for {recipe.id}: {len(plan.pantry_entries)} already in pantry")
        return plan

    def commit(self, user_id: str, plan: ReconciliationPlan) -> int:
        return plan.commit(self.store, user_id)
