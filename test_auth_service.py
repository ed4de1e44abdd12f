#!/usr/bin/env python3
"""
Test script for authentication and profile services.
Tests sign-up with default profile, sign-in, session restore and expiry,
credential changes, and session-change notifications.
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from models import NutritionGoals
from services.auth_service import AuthService, SessionEvent
from services.database_service import DatabaseService
from services.errors import AuthenticationError, ValidationError
from services.profile_service import ProfileService
from utils import Config


def create_test_auth():
    store = DatabaseService(":memory:")
    auth = AuthService(store, ProfileService(store), Config())
    return store, auth


def test_sign_up_creates_user_profile_and_session():
    print("\nTesting sign-up...")
    store, auth = create_test_auth()

    session = auth.sign_up("Ada Cook", "  Ada@Example.com ", "secret1")
    assert session.email == "ada@example.com"
    assert session.name == "Ada Cook"
    assert session.token
    assert not session.is_expired()

    user_row = store.select_one('users', [('id', 'eq', session.user_id)])
    assert user_row['password_hash'] != "secret1", "Password stored hashed"

    profile = auth.profiles.get_profile(session.user_id)
    assert profile is not None
    assert profile.name == "Ada Cook"
    assert profile.nutritional_goals == NutritionGoals(2000, 150, 250, 65, 25)
    assert profile.dietary_restrictions == []
    print("[OK] Sign-up creates profile with default goals")


def test_sign_up_validation():
    print("\nTesting sign-up validation...")
    store, auth = create_test_auth()

    for name, email, password in [("", "a@b.com", "secret1"),
                                  ("Ada", "not-an-email", "secret1"),
                                  ("Ada", "ada@example.com", "12345"),
                                  ("Ada", "", "secret1")]:
        try:
            auth.sign_up(name, email, password)
            assert False, f"Sign-up should fail for {name!r}, {email!r}"
        except ValidationError:
            pass

    auth.sign_up("Ada", "ada@example.com", "secret1")
    try:
        auth.sign_up("Other Ada", "ADA@example.com", "secret2")
        assert False, "Duplicate email should be rejected"
    except AuthenticationError:
        pass
    print("[OK] Validation working correctly")


def test_sign_in_and_restore():
    print("\nTesting sign-in and session restore...")
    store, auth = create_test_auth()
    auth.sign_up("Ada", "ada@example.com", "secret1")

    try:
        auth.sign_in("ada@example.com", "wrong-password")
        assert False, "Wrong password should be rejected"
    except AuthenticationError:
        pass

    try:
        auth.sign_in("nobody@example.com", "secret1")
        assert False, "Unknown email should be rejected"
    except AuthenticationError:
        pass

    session = auth.sign_in("ADA@example.com", "secret1")
    restored = auth.restore_session(session.token)
    assert restored is not None
    assert restored.user_id == session.user_id
    assert restored.name == "Ada"

    assert auth.restore_session(None) is None
    assert auth.restore_session("bogus-token") is None
    print("[OK] Sign-in and restore working")


def test_expired_session_is_removed():
    store, auth = create_test_auth()
    session = auth.sign_up("Ada", "ada@example.com", "secret1")

    past = (datetime.now() - timedelta(minutes=1)).isoformat()
    store.update('sessions', [('token', 'eq', session.token)], {'expires_at': past})

    assert auth.restore_session(session.token) is None
    assert store.select_one('sessions', [('token', 'eq', session.token)]) is None


def test_session_events_and_unsubscribe():
    print("\nTesting session notifications...")
    store, auth = create_test_auth()
    events = []
    unsubscribe = auth.subscribe(lambda event, session: events.append((event, session)))

    session = auth.sign_up("Ada", "ada@example.com", "secret1")
    auth.sign_out(session)
    assert [e for e, _ in events] == [SessionEvent.SIGNED_IN, SessionEvent.SIGNED_OUT]
    assert events[0][1] is session
    assert events[1][1] is None
    assert auth.restore_session(session.token) is None, "Sign-out ends the stored session"

    unsubscribe()
    auth.sign_in("ada@example.com", "secret1")
    assert len(events) == 2, "No events after unsubscribe"
    print("[OK] Subscribers notified of session changes")


def test_failing_listener_does_not_block_others():
    store, auth = create_test_auth()
    seen = []

    def broken(event, session):
        raise RuntimeError("listener bug")

    auth.subscribe(broken)
    auth.subscribe(lambda event, session: seen.append(event))
    auth.sign_up("Ada", "ada@example.com", "secret1")
    assert seen == [SessionEvent.SIGNED_IN]


def test_update_password_rules():
    print("\nTesting password change...")
    store, auth = create_test_auth()
    session = auth.sign_up("Ada", "ada@example.com", "secret1")

    bad_attempts = [
        ("secret1", "newpass1", "different", ValidationError),
        ("secret1", "short", "short", ValidationError),
        ("secret1", "secret1", "secret1", ValidationError),
        ("wrong-current", "newpass1", "newpass1", AuthenticationError),
    ]
    for current, new, confirm, error in bad_attempts:
        try:
            auth.update_password(session, current, new, confirm)
            assert False, f"Password change should fail with {error.__name__}"
        except error:
            pass

    auth.update_password(session, "secret1", "newpass1", "newpass1")
    auth.sign_in("ada@example.com", "newpass1")
    try:
        auth.sign_in("ada@example.com", "secret1")
        assert False, "Old password should no longer work"
    except AuthenticationError:
        pass
    print("[OK] Password rules enforced")


def test_update_email_and_name():
    print("\nTesting email and name changes...")
    store, auth = create_test_auth()
    session = auth.sign_up("Ada", "ada@example.com", "secret1")
    auth.sign_up("Bob", "bob@example.com", "secret2")

    try:
        auth.update_email(session, "new@example.com", "wrong")
        assert False, "Email change needs the current password"
    except AuthenticationError:
        pass

    try:
        auth.update_email(session, "bob@example.com", "secret1")
        assert False, "Email already in use"
    except AuthenticationError:
        pass

    auth.update_email(session, "New@Example.com", "secret1")
    assert session.email == "new@example.com"
    auth.sign_in("new@example.com", "secret1")

    auth.update_name(session, "Ada Lovelace")
    assert session.name == "Ada Lovelace"
    profile = auth.profiles.get_profile(session.user_id)
    assert profile.name == "Ada Lovelace"
    assert profile.email == "new@example.com"
    assert auth.get_user(session.user_id).get_display_name() == "Ada Lovelace"
    print("[OK] Email and name updates working")


def test_profile_save_round_trip():
    store, auth = create_test_auth()
    session = auth.sign_up("Ada", "ada@example.com", "secret1")

    profile = auth.profiles.get_profile(session.user_id)
    profile.dietary_restrictions = ["Vegetarian"]
    profile.allergies = ["Peanut"]
    profile.nutritional_goals = NutritionGoals(daily_calories=1800, protein=120)
    auth.profiles.save_profile(profile)

    saved = auth.profiles.get_profile(session.user_id)
    assert saved.dietary_restrictions == ["Vegetarian"]
    assert saved.allergies == ["Peanut"]
    assert saved.nutritional_goals.daily_calories == 1800
    assert saved.nutritional_goals.fiber == 25
    assert len(store.select('profiles', [('user_id', 'eq', session.user_id)])) == 1


if __name__ == "__main__":
    tests = [
        test_sign_up_creates_user_profile_and_session,
        test_sign_up_validation,
        test_sign_in_and_restore,
        test_expired_session_is_removed,
        test_session_events_and_unsubscribe,
        test_failing_listener_does_not_block_others,
        test_update_password_rules,
        test_update_email_and_name,
        test_profile_save_round_trip,
    ]
    try:
        for test in tests:
            test()
        print("\n[SUCCESS] All authentication tests passed!")
        sys.exit(0)
    except Exception as e:
        print(f"[ERROR] Authentication test failed with error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
