"""
Exception types for TastyTray services.

Store and auth failures propagate to the page that triggered them, where they
are shown to the user. Recipe providers never raise; see recipe_service.
"""

from typing import Optional


class TastyTrayError(Exception):
    """Base class for all application errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StoreError(TastyTrayError):
    """Backend store operation failed"""

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(message)
        self.table = table


class RecordNotFoundError(StoreError):
    """Update or single-row lookup matched no row"""


class AuthenticationError(TastyTrayError):
    """Sign-in, sign-up or credential change was rejected"""


class ValidationError(TastyTrayError):
    """Input rejected before any backend call was made"""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.field_name = field_name


class ReconciliationError(TastyTrayError):
    """Saving ingredient choices failed partway; earlier inserts are not rolled back"""

    def __init__(self, message: str, committed: int = 0):
        super().__init__(message)
        self.committed = committed
