import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["JWT_AUDIENCE"] = ""
os.environ["DAY_BOUNDARY_TIMEZONE"] = "UTC"
os.environ["HABIT_STATS_WINDOW_DAYS"] = "30"

import pytest  # noqa: E402

from lifeos import app as flask_app  # noqa: E402
from lifeos.auth import generate_token  # noqa: E402
from lifeos.identity import resolve_user  # noqa: E402
from lifeos.models import db  # noqa: E402


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True, DAY_BOUNDARY_TIMEZONE="UTC", HABIT_STATS_WINDOW_DAYS=30)
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(external_id="user_alice", email="alice@example.com", **claims):
        return resolve_user(external_id, {"email": email, **claims})
    return _make_user


@pytest.fixture
def auth_headers(app):
    def _auth_headers(external_id="user_alice", email="alice@example.com", **claims):
        token = generate_token(external_id, email, **claims)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


@pytest.fixture
def alice(make_user):
    return make_user()


@pytest.fixture
def bob(make_user):
    return make_user("user_bob", "bob@example.com")
