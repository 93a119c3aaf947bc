import pytest
from flask_jwt_extended import create_access_token

from pagetree import create_app
from pagetree.extensions import db
from pagetree.models import User
from pagetree.application.cms.create_page import create_page
from pagetree.application.cms.install import install_site


@pytest.fixture
def app(tmp_path):
    """App on an in-memory database with the homepage installed."""
    (tmp_path / "cache").mkdir()
    (tmp_path / "site").mkdir()

    app = create_app("testing")
    app.config.update(
        CACHE_DIR=str(tmp_path / "cache"),
        SITE_ROOT=str(tmp_path / "site"),
    )

    with app.app_context():
        db.create_all()
        install_site()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _user(email, level=0, permissions=None, alerts=None):
    user = User()
    user.email = email
    user.name = email.split("@")[0]
    user.level = level
    user.permissions = permissions or {}
    user.alerts = alerts or []
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin(app):
    return _user("admin@example.com", level=1)


@pytest.fixture
def editor(app):
    return _user("editor@example.com", permissions={"page": {"0": "e"}})


@pytest.fixture
def publisher(app):
    return _user("publisher@example.com", permissions={"page": {"0": "p"}})


@pytest.fixture
def make_page(admin):
    """Create a page as the admin, with sensible defaults."""
    def _make(nav_title, parent=0, **fields):
        fields.setdefault("title", nav_title)
        fields.setdefault("template", "content")
        return create_page(actor_id=admin.id, nav_title=nav_title, parent=parent, **fields)
    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user, **extra):
        token = create_access_token(identity=str(user.id))
        headers = {"Authorization": f"Bearer {token}"}
        headers.update(extra)
        return headers
    return _headers
