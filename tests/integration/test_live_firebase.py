"""Live checks against a real Firebase project.

Requires FIREBASE_PROJECT_ID, FIREBASE_API_KEY and a test account in
FIREBASE_TEST_EMAIL / FIREBASE_TEST_PASSWORD whose database rules allow
writes under /firerest-tests.
"""
import os
import uuid

import pytest

from firerest.config import load_settings
from firerest.core.firebase import FirebaseApp

REQUIRED = ["FIREBASE_PROJECT_ID", "FIREBASE_API_KEY", "FIREBASE_TEST_EMAIL", "FIREBASE_TEST_PASSWORD"]

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        any(not os.environ.get(var) for var in REQUIRED),
        reason="Live Firebase credentials not configured",
    ),
]


@pytest.fixture(scope="module")
def live_app():
    app = FirebaseApp.from_config(load_settings())
    yield app
    app.close()


def test_sign_in_write_read_remove(live_app):
    live_app.auth.sign_in_with_password(os.environ["FIREBASE_TEST_EMAIL"], os.environ["FIREBASE_TEST_PASSWORD"])
    assert live_app.auth.current_user is not None, live_app.auth.last_error

    ref = live_app.database.get_reference("firerest-tests").child(uuid.uuid4().hex)
    try:
        assert ref.write({"x": 1}) is True
        assert ref.read() == {"x": 1}
    finally:
        assert ref.remove() is True
    assert ref.read() is None


def test_refresh_token_keeps_identity(live_app):
    live_app.auth.sign_in_with_password(os.environ["FIREBASE_TEST_EMAIL"], os.environ["FIREBASE_TEST_PASSWORD"])
    user = live_app.auth.current_user
    assert user is not None

    live_app.auth.sign_in_with_token(user.refresh_token)

    refreshed = live_app.auth.current_user
    assert refreshed is not None, live_app.auth.last_error
    assert refreshed.local_id == user.local_id


def test_bad_password_clears_session(live_app):
    live_app.auth.sign_in_with_password(os.environ["FIREBASE_TEST_EMAIL"], "definitely-wrong-" + uuid.uuid4().hex)
    assert live_app.auth.current_user is None
    assert live_app.auth.last_error is not None
