"""Shared test fixtures."""
from contextlib import ExitStack
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mission_control.database import Base

# Every module that does `from mission_control.database import get_session`
SESSION_USERS = [
    'mission_control.services.members',
    'mission_control.services.imports',
    'mission_control.services.reports',
    'mission_control.services.records',
]


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created (one shared connection)."""
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    import mission_control.models.team_member
    import mission_control.models.import_record
    import mission_control.models.activity
    import mission_control.models.prospect
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    """Session for test setup and assertions. Commit setup data explicitly."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(session_factory):
    """
    Route get_session() calls inside the services to the test engine.

    Each module binds get_session at import time, so each binding is patched.
    Every call returns a new session so close() in production code does not
    tear down the shared test connection.
    """
    with ExitStack() as stack:
        for module in SESSION_USERS:
            stack.enter_context(patch(f'{module}.get_session', side_effect=lambda: session_factory()))
        yield session_factory


@pytest.fixture
def count_rows(session_factory):
    """Count rows of a model in a fresh session, so no stale identity map is involved."""
    def _count(model, **filters):
        session = session_factory()
        try:
            return session.query(model).filter_by(**filters).count()
        finally:
            session.close()
    return _count


@pytest.fixture
def app():
    """Flask test app."""
    from mission_control import create_app
    app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_activities():
    """Factory: activity dicts with the given number of each type."""
    def _make(emails=0, calls=0, meetings=0, proposals=0, **extra):
        items = []
        for activity_type, n in (('emails', emails), ('calls', calls),
                                 ('meetings', meetings), ('proposals', proposals)):
            for i in range(n):
                item = {
                    'type': activity_type,
                    'name': f'{activity_type} {i + 1}',
                    'notes': '',
                    'timestamp': f'2026-01-15T{10 + i % 10:02d}:00:00Z',
                }
                item.update(extra)
                items.append(item)
        return items
    return _make


@pytest.fixture
def make_document(make_activities):
    """Factory fixture — builds a tracker export document."""
    def _make(name='Jane Doe', **overrides):
        doc = dict(
            userName=name,
            exportedAt='2026-01-16T17:30:00Z',
            currentWeekStart='2026-01-12',
            targets={'emails': 50, 'calls': 50, 'meetings': 10, 'proposals': 5},
            activities=make_activities(emails=3, calls=2, meetings=1),
            archivedActivities=[],
            prospects=[
                {'company': 'Acme', 'contact': 'Wile Coyote', 'email': 'wile@acme.example',
                 'phone': '555-0100', 'stage': 'won', 'dealValue': 1000,
                 'createdAt': '2026-01-02T09:00:00Z', 'lastTouch': '2026-01-14T09:00:00Z',
                 'wonAt': '2026-01-14T09:00:00Z'},
                {'company': 'Globex', 'contact': 'Hank Scorpio', 'email': 'hank@globex.example',
                 'phone': '', 'stage': 'cold', 'dealValue': 0,
                 'createdAt': '2026-01-05T09:00:00Z', 'lastTouch': '2026-01-10T09:00:00Z'},
            ],
        )
        doc.update(overrides)
        return doc
    return _make


@pytest.fixture
def member():
    """A resolved team member named Jane Doe."""
    from mission_control.services.members import resolve_member
    return resolve_member('Jane Doe')
