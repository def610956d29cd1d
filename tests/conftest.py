import pytest

from config import TestingConfig
from taskflow import create_app, db
from taskflow.models import User
from taskflow.services.projects import add_member, create_project

PASSWORD = 'password123'


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Application context for tests that call services directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(email, name=None, password=PASSWORD):
    user = User(email=email, name=name)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def owner(ctx):
    return make_user('owner@example.com', 'Olive Owner')


@pytest.fixture
def project(owner):
    return create_project(owner, 'Launch')


@pytest.fixture
def member(project, owner):
    user = make_user('member@example.com', 'Max Member')
    add_member(project, owner, user.email, role='MEMBER')
    return user


@pytest.fixture
def admin(project, owner):
    user = make_user('admin@example.com', 'Ada Admin')
    add_member(project, owner, user.email, role='ADMIN')
    return user


@pytest.fixture
def outsider(ctx):
    return make_user('outsider@example.com', 'Otto Outsider')


def register(client, email, name=None, password=PASSWORD):
    """Register through the API; the client is logged in afterwards."""
    response = client.post('/auth/register', json={'email': email, 'name': name, 'password': password})
    assert response.status_code == 201, response.get_json()
    return response.get_json()


@pytest.fixture
def owner_client(app):
    client = app.test_client()
    client.user = register(client, 'owner@example.com', 'Olive Owner')
    return client


@pytest.fixture
def api_project(owner_client):
    response = owner_client.post('/api/projects', json={'name': 'Launch'})
    assert response.status_code == 201
    return response.get_json()
