"""
Profile service for TastyTray application.

Reads and writes the one-per-user ``profiles`` row holding display name,
dietary preferences and nutrition goals.
"""

from typing import Any, Dict, Optional

from models import UserProfile, NutritionGoals
from utils import get_logger
from .database_service import BackendStore

logger = get_logger(__name__)


def profile_from_row(row: Dict[str, Any]) -> UserProfile:
    """Build a profile from a store row"""
    return UserProfile(
        id=row.get('id'),
        user_id=row['user_id'],
        name=row.get('name') or "",
        email=row.get('email') or "",
        dietary_restrictions=list(row.get('dietary_restrictions') or []),
        cuisine_preferences=list(row.get('cuisine_preferences') or []),
        allergies=list(row.get('allergies') or []),
        nutritional_goals=NutritionGoals.from_dict(row.get('nutritional_goals')),
        created_at=row.get('created_at'),
        updated_at=row.get('updated_at')
    )


class ProfileService:
    """Accessor for user profiles"""

    def __init__(self, store: BackendStore):
        self.store = store

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """Get a user's profile; new users may not have one yet"""
        row = self.store.select_one('profiles', [('user_id', 'eq', user_id)])
        if row is None:
            logger.info(f"No profile found for user {user_id}")
            return None
        return profile_from_row(row)

    def save_profile(self, profile: UserProfile) -> UserProfile:
        """Create or replace the user's profile"""
        row = self.store.upsert('profiles', {
            'user_id': profile.user_id,
            'name': profile.name,
            'email': profile.email,
            'dietary_restrictions': profile.dietary_restrictions,
            'cuisine_preferences': profile.cuisine_preferences,
            'allergies': profile.allergies,
            'nutritional_goals': profile.nutritional_goals.to_dict(),
        }, conflict_columns=['user_id'])
        logger.info(f"Saved profile for user {profile.user_id}")
        return profile_from_row(row)

    def create_default_profile(self, user_id: str, name: str, email: str) -> UserProfile:
        """Profile written at sign-up with empty preferences and default goals"""
        return self.save_profile(UserProfile(user_id=user_id, name=name, email=email))

    def update_name(self, user_id: str, name: str, email: str) -> UserProfile:
        """Rename, keeping the rest of the profile (or defaults if absent)"""
        profile = self.get_profile(user_id) or UserProfile(user_id=user_id, name=name, email=email)
        profile.name = name
        profile.email = email
        return self.save_profile(profile)
