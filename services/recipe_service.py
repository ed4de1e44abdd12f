"""
Recipe source adapter for TastyTray application.

Fetches recipes from two external providers and normalizes both into the
internal Recipe shape:

- Spoonacular: paid, structured ingredients/steps/nutrients, filterable search.
- TheMealDB: free, loosely-typed records with flat ingredient/measure pairs
  and a single instructions blob.

Providers never raise. Network failures, bad JSON and malformed records are
logged and treated as zero results, so RecipeService can fall back from one
provider to the other.
"""

import random
from typing import Any, Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from models import Difficulty, NutritionData, Recipe, RecipeIngredient, RecipeStep, SearchOptions
from utils import Config, get_config, get_logger

logger = get_logger(__name__)

SPOONACULAR_PREFIX = "spoonacular-"
MEALDB_PREFIX = "mealdb-"

DESCRIPTION_LENGTH = 150
MEALDB_MAX_INGREDIENTS = 20
SEARCH_RESULT_LIMIT = 6

SPOONACULAR_NUTRIENTS = {
    'calories': 'Calories',
    'protein': 'Protein',
    'carbs': 'Carbohydrates',
    'fat': 'Fat',
    'fiber': 'Fiber',
    'sugar': 'Sugar',
    'sodium': 'Sodium',
}


def truncate_description(text: str) -> str:
    return text[:DESCRIPTION_LENGTH] + "..." if text else ""


def strip_html(html: Optional[str]) -> str:
    """Plain text of an HTML fragment such as a Spoonacular summary"""
    if not html:
        return ""
    return BeautifulSoup(html, 'html.parser').get_text()


class RecipeProvider:
    """
    Base class for recipe providers.

    Subclasses implement the raw calls and the record transform; the shared
    ``_get_json`` turns every request failure into ``None``.
    """

    name = "provider"
    prefix = ""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 5):
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': 'TastyTray/1.0'})
        self.timeout = timeout

    def random_recipes(self, count: int) -> List[Recipe]:
        raise NotImplementedError

    def search(self, options: SearchOptions) -> List[Recipe]:
        raise NotImplementedError

    def get_recipe(self, provider_id: str) -> Optional[Recipe]:
        raise NotImplementedError

    def is_available(self) -> bool:
        return True

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.warning(f"{self.name} request failed for {url}: {e}")
            return None
        except ValueError as e:
            logger.warning(f"{self.name} returned invalid JSON for {url}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"{self.name} returned unexpected payload for {url}")
            return None
        return data

    def _transform_all(self, records: Any) -> List[Recipe]:
        recipes = []
        for record in records or []:
            recipe = self._safe_transform(record)
            if recipe is not None:
                recipes.append(recipe)
        return recipes

    def _safe_transform(self, record: Any) -> Optional[Recipe]:
        try:
            return self.transform(record)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Skipping malformed {self.name} record: {e}")
            return None

    def transform(self, record: Dict[str, Any]) -> Recipe:
        raise NotImplementedError


class SpoonacularProvider(RecipeProvider):
    """Paid provider with structured data and filterable search"""

    name = "spoonacular"
    prefix = SPOONACULAR_PREFIX

    def __init__(self, api_key: str, base_url: str = "https://api.spoonacular.com/recipes",
                 session: Optional[requests.Session] = None, timeout: float = 8):
        super().__init__(session, timeout)
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')

    def is_available(self) -> bool:
        return bool(self.api_key)

    def random_recipes(self, count: int) -> List[Recipe]:
        if not self.is_available() or count <= 0:
            return []
        data = self._get_json(f"{self.base_url}/random", self._params(number=count))
        if not data:
            return []
        return self._transform_all(data.get('recipes'))[:count]

    def search(self, options: SearchOptions) -> List[Recipe]:
        if not self.is_available() or options.is_empty():
            return []

        params = self._params(number=12)
        if options.query:
            params['query'] = options.query
        if options.cuisine:
            params['cuisine'] = ",".join(options.cuisine)
        if options.diet:
            params['diet'] = ",".join(options.diet)
        if options.allergies:
            params['intolerances'] = ",".join(options.allergies)
        if options.max_time:
            params['maxReadyTime'] = options.max_time
        if options.include_ingredients:
            params['includeIngredients'] = ",".join(options.include_ingredients)
        if options.exclude_ingredients:
            params['excludeIngredients'] = ",".join(options.exclude_ingredients)

        data = self._get_json(f"{self.base_url}/complexSearch", params)
        if not data:
            return []

        recipes = []
        for result in (data.get('results') or [])[:SEARCH_RESULT_LIMIT]:
            if not isinstance(result, dict) or 'id' not in result:
                continue
            recipe = self.get_recipe(str(result['id']))
            if recipe is not None:
                recipes.append(recipe)
        return recipes

    def get_recipe(self, provider_id: str) -> Optional[Recipe]:
        if not self.is_available():
            return None
        data = self._get_json(f"{self.base_url}/{provider_id}/information", self._params())
        return self._safe_transform(data) if data else None

    def transform(self, record: Dict[str, Any]) -> Recipe:
        ingredients = [
            RecipeIngredient(
                id=str(ing.get('id') or index),
                name=ing.get('name') or ing.get('original') or "",
                amount=float(ing.get('amount') or 0),
                unit=ing.get('unit') or "",
                image=ing.get('image')
            )
            for index, ing in enumerate(record.get('extendedIngredients') or [])
        ]

        instructions = record.get('analyzedInstructions') or []
        steps = [RecipeStep(num=int(step['number']), instruction=step['step'])
                 for step in (instructions[0].get('steps') or [] if instructions else [])]

        nutrients = {n.get('name'): n.get('amount') for n in
                     ((record.get('nutrition') or {}).get('nutrients') or [])}
        nutrition = NutritionData(**{field: float(nutrients.get(label) or 0)
                                     for field, label in SPOONACULAR_NUTRIENTS.items()})

        cook_time = int(record.get('readyInMinutes') or 30)
        score = record.get('spoonacularScore')

        return Recipe(
            id=f"{self.prefix}{record['id']}",
            name=record['title'],
            image=record.get('image') or "",
            servings=int(record.get('servings') or 4),
            cook_time=cook_time,
            description=truncate_description(strip_html(record.get('summary'))),
            steps=steps,
            ingredients=ingredients,
            nutrition=nutrition,
            cuisines=list(record.get('cuisines') or []),
            tags=list(record.get('diets') or []),
            difficulty=Difficulty.from_cook_time(cook_time),
            rating=round(float(score) / 20, 1) if score is not None else None,
            source=self.name
        )

    def _params(self, **extra) -> Dict[str, Any]:
        params = {'apiKey': self.api_key, 'includeNutrition': 'true'}
        params.update(extra)
        return params


class MealDBProvider(RecipeProvider):
    """
    Free provider. Records carry no servings, timing, nutrition or rating,
    so those are synthesized from ``rng``.
    """

    name = "mealdb"
    prefix = MEALDB_PREFIX

    def __init__(self, base_url: str = "https://www.themealdb.com/api/json/v1/1",
                 session: Optional[requests.Session] = None, timeout: float = 5,
                 rng: Optional[random.Random] = None):
        super().__init__(session, timeout)
        self.base_url = base_url.rstrip('/')
        self.rng = rng or random.Random()

    def random_recipes(self, count: int) -> List[Recipe]:
        # one meal per call
        recipes = []
        for _ in range(max(count, 0)):
            data = self._get_json(f"{self.base_url}/random.php")
            if data is None:
                break
            recipes.extend(self._transform_all(data.get('meals'))[:1])
        return recipes

    def search(self, options: SearchOptions) -> List[Recipe]:
        if not options.query:
            return []
        data = self._get_json(f"{self.base_url}/search.php", {'s': options.query})
        if not data:
            return []
        return self._transform_all((data.get('meals') or [])[:SEARCH_RESULT_LIMIT])

    def get_recipe(self, provider_id: str) -> Optional[Recipe]:
        data = self._get_json(f"{self.base_url}/lookup.php", {'i': provider_id})
        if not data:
            return None
        recipes = self._transform_all(data.get('meals'))
        return recipes[0] if recipes else None

    def transform(self, record: Dict[str, Any]) -> Recipe:
        meal_id = record['idMeal']
        ingredients = []
        for i in range(1, MEALDB_MAX_INGREDIENTS + 1):
            name = (record.get(f'strIngredient{i}') or "").strip()
            if not name:
                continue
            ingredients.append(RecipeIngredient(
                id=f"{meal_id}-{i}",
                name=name,
                amount=1.0,
                unit=(record.get(f'strMeasure{i}') or "").strip()
            ))

        instructions = record.get('strInstructions') or ""
        sentences = [s.strip() for s in instructions.split('.') if s.strip()]
        steps = [RecipeStep(num=i, instruction=f"{s}.") for i, s in enumerate(sentences, start=1)]

        rng = self.rng
        area = record.get('strArea')
        tags = record.get('strTags')

        return Recipe(
            id=f"{self.prefix}{meal_id}",
            name=record['strMeal'],
            image=record.get('strMealThumb') or "",
            servings=rng.randint(2, 5),
            cook_time=rng.randint(15, 59),
            description=truncate_description(instructions),
            steps=steps,
            ingredients=ingredients,
            nutrition=NutritionData(
                calories=rng.randint(200, 599),
                protein=rng.randint(15, 39),
                carbs=rng.randint(20, 59),
                fat=rng.randint(8, 27),
                fiber=rng.randint(3, 10),
                sugar=rng.randint(5, 19),
                sodium=rng.randint(300, 999)
            ),
            cuisines=[area] if area else [],
            tags=[t.strip() for t in tags.split(',') if t.strip()] if tags else [],
            difficulty=rng.choice(list(Difficulty)),
            rating=round(rng.uniform(3.5, 5.0), 1),
            source=self.name
        )


class RecipeService:
    """
    Recipe lookups across both providers.

    Spoonacular is primary when an API key is configured; MealDB fills in
    whatever it could not supply. No method raises.
    """

    def __init__(self, config: Optional[Config] = None,
                 spoonacular: Optional[SpoonacularProvider] = None,
                 mealdb: Optional[MealDBProvider] = None):
        self.config = config or get_config()
        self.spoonacular = spoonacular or SpoonacularProvider(
            self.config.spoonacular_api_key,
            self.config.spoonacular_url,
            timeout=self.config.spoonacular_timeout_seconds
        )
        self.mealdb = mealdb or MealDBProvider(
            self.config.mealdb_url,
            timeout=self.config.mealdb_timeout_seconds
        )
        if not self.config.has_spoonacular():
            logger.info("No Spoonacular API key configured, using TheMealDB only")

    def fetch_random_recipes(self, count: Optional[int] = None) -> List[Recipe]:
        """Random feed: primary provider first, remaining slots from the fallback"""
        count = self.config.random_recipe_count if count is None else count
        if count <= 0:
            return []

        recipes = self._call(self.spoonacular.random_recipes, count)
        if len(recipes) < count:
            recipes.extend(self._call(self.mealdb.random_recipes, count - len(recipes)))

        logger.info(f"Fetched {len(recipes)} random recipes")
        return recipes[:count]

    def search_recipes(self, options: SearchOptions) -> List[Recipe]:
        if options.is_empty():
            return []

        recipes = self._call(self.spoonacular.search, options)
        if not recipes:
            recipes = self._call(self.mealdb.search, options)

        logger.info(f"Search '{options.query}' returned {len(recipes)} recipes")
        return recipes

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        """Look up one recipe by its source-qualified id"""
        if recipe_id.startswith(SPOONACULAR_PREFIX):
            return self._call(self.spoonacular.get_recipe, recipe_id[len(SPOONACULAR_PREFIX):], default=None)
        if recipe_id.startswith(MEALDB_PREFIX):
            return self._call(self.mealdb.get_recipe, recipe_id[len(MEALDB_PREFIX):], default=None)
        logger.warning(f"Unknown recipe id format: {recipe_id}")
        return None

    def _call(self, method, *args, default: Any = ()):
        # last line of defence; providers already catch expected failures
        try:
            return method(*args)
        except Exception:
            logger.exception(f"Recipe provider call {method.__qualname__} failed")
            return list(default) if isinstance(default, tuple) else default
