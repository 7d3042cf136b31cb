"""
Pytest configuration and fixtures for testing the map review API.
"""

import os
import sys
import pytest
from faker import Faker

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mapreview import create_app, db
from mapreview.constants import TagType, TaskStatus
from mapreview.models import Tag, Task, User
from mapreview.utils import create_token

fake = Faker()


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    os.environ['JWT_SECRET_KEY'] = 'test-secret-key-for-testing'

    app = create_app('testing')

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client for each test function."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        yield db.session
        db.session.rollback()


def _create_user(**overrides):
    """Helper to create a user with sensible defaults."""
    data = {
        'username': fake.user_name() + fake.pystr(min_chars=4, max_chars=6),
        'is_reviewer': False,
        'needs_review': False,
    }
    data.update(overrides)
    user = User(**data)
    db.session.add(user)
    db.session.commit()
    return user


def _create_task(task_id=None, **overrides):
    data = {
        'name': fake.sentence(nb_words=3),
        'status': TaskStatus.CREATED,
    }
    data.update(overrides)
    task = Task(id=task_id, **data)
    db.session.add(task)
    db.session.commit()
    return task


@pytest.fixture
def mapper(db_session):
    """A regular mapper."""
    return _create_user()


@pytest.fixture
def reviewer(db_session):
    """A user allowed to review tasks."""
    return _create_user(is_reviewer=True)


@pytest.fixture
def make_user(db_session):
    return _create_user


@pytest.fixture
def make_task(db_session):
    return _create_task


@pytest.fixture
def bundle_task_ids(db_session):
    """Three fresh tasks with ids 10, 20 and 30."""
    for task_id in (10, 20, 30):
        _create_task(task_id)
    return [10, 20, 30]


@pytest.fixture
def existing_tag(db_session):
    """A task tag named 'foo'."""
    tag = Tag(name='foo', tag_type=TagType.TASKS)
    db.session.add(tag)
    db.session.commit()
    return tag


@pytest.fixture
def auth_headers(mapper):
    """Get authentication headers for the mapper."""
    return {'Authorization': f'Bearer {create_token(mapper.id)}'}


@pytest.fixture
def reviewer_headers(reviewer):
    """Get authentication headers for the reviewer."""
    return {'Authorization': f'Bearer {create_token(reviewer.id)}'}
