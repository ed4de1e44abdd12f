"""
Authentication service for TastyTray application.

Handles sign-up, sign-in, sign-out, session restore and credential changes on
top of the backend store, and notifies subscribers whenever the session
changes so the application context can load or clear user data.
"""

import secrets
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional

import bcrypt

from models import User, UserSession
from utils import Config, get_config, get_logger
from .database_service import BackendStore, now_iso
from .errors import AuthenticationError, StoreError, ValidationError
from .profile_service import ProfileService

logger = get_logger(__name__)


class SessionEvent(Enum):
    """Session change notifications"""
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    USER_UPDATED = "user_updated"


SessionListener = Callable[[SessionEvent, Optional[UserSession]], None]


class AuthService:
    """
    Authentication service handling credentials and sessions.
    Raises ValidationError for bad input and AuthenticationError for rejected credentials.
    """

    def __init__(self, store: BackendStore, profile_service: Optional[ProfileService] = None,
                 config: Optional[Config] = None):
        self.store = store
        self.profiles = profile_service or ProfileService(store)
        self.config = config or get_config()
        self._listeners: List[SessionListener] = []

    # Password Management

    def hash_password(self, password: str) -> str:
        """Hash password using bcrypt"""
        hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
        return hashed.decode('utf-8')

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify password against hash"""
        try:
            return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
        except ValueError as e:
            logger.error(f"Password verification error: {e}")
            return False

    # Subscriptions

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a session-change listener; returns an unsubscribe function"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: SessionEvent, session: Optional[UserSession]):
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:
                # a failing listener must not stop the others
                logger.exception(f"Session listener failed on {event.value}")

    # Sign up / in / out

    def sign_up(self, name: str, email: str, password: str) -> UserSession:
        """Register a new user, create their profile and sign them in"""
        name = (name or "").strip()
        email = (email or "").strip().lower()

        if not email or not password:
            raise ValidationError("Please fill in all fields")
        if not name:
            raise ValidationError("Please enter your name", "name")
        self._validate_email(email)
        self._validate_password(password)

        if self.store.select_one('users', [('email', 'eq', email)]):
            logger.warning(f"Sign-up rejected - email already registered: {email}")
            raise AuthenticationError("User already registered")

        user_row = self.store.insert('users', {
            'email': email,
            'password_hash': self.hash_password(password),
            'name': name,
        })
        logger.info(f"User registered successfully: {email}")

        try:
            self.profiles.create_default_profile(user_row['id'], name, email)
        except StoreError as e:
            logger.error(f"Failed to create profile for {email}: {e}")

        session = self._open_session(user_row)
        self._notify(SessionEvent.SIGNED_IN, session)
        return session

    def sign_in(self, email: str, password: str) -> UserSession:
        """Authenticate with email and password and open a session"""
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Please fill in all fields")

        user_row = self.store.select_one('users', [('email', 'eq', email)])
        if not user_row or not self.verify_password(password, user_row['password_hash']):
            logger.warning(f"Authentication failed: {email}")
            raise AuthenticationError("Invalid login credentials")

        self.store.update('users', [('id', 'eq', user_row['id'])], {'last_login': now_iso()})
        session = self._open_session(user_row)
        logger.info(f"User signed in: {email}")
        self._notify(SessionEvent.SIGNED_IN, session)
        return session

    def sign_out(self, session: Optional[UserSession]):
        """End the session and notify listeners"""
        if session is not None:
            self.store.delete('sessions', [('token', 'eq', session.token)])
            logger.info(f"User signed out: {session.email}")
        self._notify(SessionEvent.SIGNED_OUT, None)

    def restore_session(self, token: Optional[str]) -> Optional[UserSession]:
        """Return the live session for a token, deleting it if expired"""
        if not token:
            return None
        row = self.store.select_one('sessions', [('token', 'eq', token)])
        if row is None:
            return None

        expires_at = datetime.fromisoformat(row['expires_at'])
        if datetime.now() >= expires_at:
            logger.info(f"Expired session removed for user {row['user_id']}")
            self.store.delete('sessions', [('token', 'eq', token)])
            return None

        user_row = self.store.select_one('users', [('id', 'eq', row['user_id'])])
        if user_row is None:
            return None
        return UserSession(
            user_id=user_row['id'],
            email=user_row['email'],
            name=user_row.get('name') or "",
            token=token,
            expires_at=expires_at,
            created_at=datetime.fromisoformat(row['created_at'])
        )

    def get_user(self, user_id: str) -> Optional[User]:
        row = self.store.select_one('users', [('id', 'eq', user_id)])
        if row is None:
            return None
        return User(
            id=row['id'],
            email=row['email'],
            name=row.get('name') or "",
            created_at=datetime.fromisoformat(row['created_at'])
        )

    # Credential changes

    def update_name(self, session: UserSession, name: str) -> UserSession:
        """Change display name on both the account and the profile"""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Please enter your name", "name")

        self.store.update('users', [('id', 'eq', session.user_id)], {'name': name})
        self.profiles.update_name(session.user_id, name, session.email)
        session.name = name
        self._notify(SessionEvent.USER_UPDATED, session)
        return session

    def update_email(self, session: UserSession, new_email: str, current_password: str) -> UserSession:
        """Change email after re-checking the current password"""
        new_email = (new_email or "").strip().lower()
        if not new_email or not current_password:
            raise ValidationError("Please fill in all fields")
        self._validate_email(new_email)

        self._require_current_password(session, current_password)
        existing = self.store.select_one('users', [('email', 'eq', new_email)])
        if existing and existing['id'] != session.user_id:
            raise AuthenticationError("Email address is already in use")

        self.store.update('users', [('id', 'eq', session.user_id)], {'email': new_email})
        session.email = new_email
        self.profiles.update_name(session.user_id, session.name, new_email)
        logger.info(f"Email updated for user {session.user_id}")
        self._notify(SessionEvent.USER_UPDATED, session)
        return session

    def update_password(self, session: UserSession, current_password: str,
                        new_password: str, confirm_password: str):
        """Change password; the new one must differ, match its confirmation and meet the minimum"""
        if not current_password or not new_password or not confirm_password:
            raise ValidationError("Please fill in all password fields")
        if new_password != confirm_password:
            raise ValidationError("New passwords do not match", "confirm_password")
        self._validate_password(new_password)
        if new_password == current_password:
            raise ValidationError("New password must be different from current password", "new_password")

        self._require_current_password(session, current_password)
        self.store.update('users', [('id', 'eq', session.user_id)],
                          {'password_hash': self.hash_password(new_password)})
        logger.info(f"Password updated for user {session.user_id}")
        self._notify(SessionEvent.USER_UPDATED, session)

    # Utility Methods

    def _open_session(self, user_row) -> UserSession:
        token = self._generate_session_token()
        expires_at = datetime.now() + timedelta(hours=self.config.session_duration_hours)
        row = self.store.insert('sessions', {
            'user_id': user_row['id'],
            'token': token,
            'expires_at': expires_at.isoformat(),
        })
        return UserSession(
            user_id=user_row['id'],
            email=user_row['email'],
            name=user_row.get('name') or "",
            token=token,
            expires_at=expires_at,
            created_at=datetime.fromisoformat(row['created_at'])
        )

    def _require_current_password(self, session: UserSession, password: str):
        user_row = self.store.select_one('users', [('id', 'eq', session.user_id)])
        if not user_row or not self.verify_password(password, user_row['password_hash']):
            raise AuthenticationError("Current password is incorrect")

    def _validate_email(self, email: str):
        if '@' not in email or len(email) < 5:
            raise ValidationError("Please enter a valid email address", "email")

    def _validate_password(self, password: str):
        minimum = self.config.password_min_length
        if len(password) < minimum:
            raise ValidationError(f"Password must be at least {minimum} characters long", "password")

    def _generate_session_token(self) -> str:
        """Generate secure session token"""
        return secrets.token_urlsafe(32)
