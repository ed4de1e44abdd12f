"""
User, session and profile models for the TastyTray application.

The session is an explicit value handed around by the application context
rather than ambient global state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class NutritionGoals:
    """Daily nutrition targets stored on the profile"""
    daily_calories: int = 2000
    protein: int = 150
    carbs: int = 250
    fat: int = 65
    fiber: int = 25

    def to_dict(self) -> Dict[str, int]:
        return {
            'dailyCalories': self.daily_calories,
            'protein': self.protein,
            'carbs': self.carbs,
            'fat': self.fat,
            'fiber': self.fiber
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'NutritionGoals':
        """Build goals from the stored JSON shape, falling back to defaults"""
        if not data:
            return cls()
        defaults = cls()
        return cls(
            daily_calories=int(data.get('dailyCalories', defaults.daily_calories)),
            protein=int(data.get('protein', defaults.protein)),
            carbs=int(data.get('carbs', defaults.carbs)),
            fat=int(data.get('fat', defaults.fat)),
            fiber=int(data.get('fiber', defaults.fiber))
        )


@dataclass
class User:
    """Account known to the identity provider"""
    id: str
    email: str
    name: str = ""
    created_at: Optional[datetime] = None

    def get_display_name(self) -> str:
        """Get user's display name"""
        return self.name or self.email.split('@')[0]


@dataclass
class UserSession:
    """Session data for a signed-in user"""
    user_id: str
    email: str
    name: str
    token: str
    expires_at: datetime
    created_at: datetime = field(default_factory=datetime.now)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if session has expired"""
        return (now or datetime.now()) >= self.expires_at

    def get_display_name(self) -> str:
        return self.name or self.email.split('@')[0]


@dataclass
class UserProfile:
    """Row of the ``profiles`` table, one per user"""
    user_id: str
    name: str
    email: str
    dietary_restrictions: List[str] = field(default_factory=list)
    cuisine_preferences: List[str] = field(default_factory=list)
    allergies: List[str] = field(default_factory=list)
    nutritional_goals: NutritionGoals = field(default_factory=NutritionGoals)
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
