"""Tests for /health, /api/stats, the report endpoints and the pipeline board."""
from unittest.mock import patch

import pytest

from mission_control import __version__
from mission_control.errors import StoreFailure
from mission_control.services.imports import import_document
from mission_control.services.members import resolve_member


@pytest.fixture
def team(make_document, make_activities):
    a = resolve_member('A')
    b = resolve_member('B')
    import_document(a.id, make_document(name='A', activities=make_activities(emails=10, calls=5)))
    import_document(b.id, make_document(
        name='B',
        activities=make_activities(emails=20, calls=1, meetings=2),
        prospects=[{'company': 'Initech', 'stage': 'proposal', 'dealValue': 400}],
    ))
    return a, b


class TestHealth:

    def test_returns_200(self, client):
        resp = client.get('/health')
        assert resp.status_code == 200
        assert resp.get_json() == {'status': 'healthy', 'version': __version__}


class TestStats:
    """GET /api/stats"""

    def test_empty_team(self, client):
        data = client.get('/api/stats').get_json()
        assert data['member_count'] == 0
        assert data['emails'] == 0

    def test_totals(self, client, team):
        data = client.get('/api/stats').get_json()
        assert data['emails'] == 30
        assert data['calls'] == 6
        assert data['meetings'] == 2
        assert data['won_deals'] == 1
        assert data['won_revenue'] == 1000.0

    def test_store_failure_is_503(self, client):
        with patch('mission_control.services.reports.list_current_imports',
                   side_effect=StoreFailure('database is locked')):
            resp = client.get('/api/stats')
        assert resp.status_code == 503
        assert resp.get_json() == {'error': 'database is locked'}


class TestReports:

    def test_leaderboard(self, client, team):
        rows = client.get('/api/reports/leaderboard').get_json()
        assert [(r['rank'], r['name'], r['total']) for r in rows] == [(1, 'B', 23), (2, 'A', 15)]

    def test_pipeline_summary(self, client, team):
        rows = client.get('/api/reports/pipeline').get_json()
        assert [r['stage'] for r in rows] == ['cold', 'contacted', 'meeting', 'proposal', 'won', 'lost']
        by_stage = {r['stage']: r for r in rows}
        assert by_stage['won']['count'] == 1
        assert by_stage['won']['value'] == 1000.0
        assert by_stage['proposal']['value'] == 400.0

    def test_progress(self, client, team):
        cards = client.get('/api/reports/progress').get_json()
        b = next(c for c in cards if c['name'] == 'B')
        emails = next(a for a in b['activities'] if a['type'] == 'emails')
        assert emails == {'type': 'emails', 'count': 20, 'target': 50, 'pct': 40.0, 'band': 'red'}


class TestPipelineBoard:
    """GET /api/pipeline"""

    def test_whole_team(self, client, team):
        columns = client.get('/api/pipeline').get_json()
        assert sum(len(c['prospects']) for c in columns) == 3

    def test_single_member(self, client, team):
        _, b = team
        columns = client.get(f'/api/pipeline?team_member_id={b.id}').get_json()
        proposal = next(c for c in columns if c['stage'] == 'proposal')
        assert [p['company'] for p in proposal['prospects']] == ['Initech']

    def test_bad_member_param(self, client):
        assert client.get('/api/pipeline?team_member_id=x').status_code == 400
