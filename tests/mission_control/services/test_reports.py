"""Tests for mission_control.services.reports — team rollups."""
from unittest.mock import patch

import pytest

from mission_control.errors import StoreFailure
from mission_control.services.imports import delete_import, import_document
from mission_control.services.members import delete_team_member, resolve_member
from mission_control.services.reports import (
    find_duplicate_companies,
    fold_leaderboard,
    fold_member_progress,
    fold_pipeline_board,
    fold_pipeline_summary,
    fold_team_stats,
    get_leaderboard,
    get_member_progress,
    get_pipeline_board,
    get_pipeline_summary,
    get_team_stats,
    progress_band,
)


def _imp(import_id, name, emails=0, calls=0, meetings=0, proposals=0, **fields):
    data = {
        'id': import_id,
        'team_member_id': import_id,
        'team_member_name': name,
        'activity_count': {'emails': emails, 'calls': calls, 'meetings': meetings, 'proposals': proposals},
        'prospect_count': 0,
        'won_count': 0,
        'won_revenue': 0.0,
        'targets': {'emails': 50, 'calls': 50, 'meetings': 10, 'proposals': 5},
    }
    data.update(fields)
    return data


# ---------------------------------------------------------------------------
# Pure folds
# ---------------------------------------------------------------------------

class TestFoldTeamStats:

    def test_sums_current_imports(self):
        stats = fold_team_stats([
            _imp(1, 'A', emails=3, calls=1, prospect_count=2, won_count=1, won_revenue=500.0),
            _imp(2, 'B', emails=2, meetings=4, prospect_count=1),
        ])
        assert stats == {
            'emails': 5, 'calls': 1, 'meetings': 4, 'proposals': 0,
            'prospects': 3, 'won_deals': 1, 'won_revenue': 500.0, 'member_count': 2,
        }

    def test_empty(self):
        stats = fold_team_stats([])
        assert stats['member_count'] == 0
        assert stats['won_revenue'] == 0.0

    def test_tolerates_missing_counts(self):
        assert fold_team_stats([{'activity_count': None}])['emails'] == 0


class TestFoldLeaderboard:

    def test_ranked_by_total_activity(self):
        board = fold_leaderboard([
            _imp(1, 'A', emails=10, calls=5),
            _imp(2, 'B', emails=20, calls=1, meetings=2),
        ])
        assert [r['name'] for r in board] == ['B', 'A']
        assert [r['total'] for r in board] == [23, 15]
        assert [r['rank'] for r in board] == [1, 2]

    def test_higher_total_wins_over_spread(self):
        board = fold_leaderboard([
            _imp(1, 'A', emails=10, calls=5, meetings=2, proposals=1),
            _imp(2, 'B', emails=20),
        ])
        assert [(r['name'], r['total']) for r in board] == [('B', 20), ('A', 18)]

    def test_ties_keep_input_order(self):
        board = fold_leaderboard([_imp(1, 'First', emails=5), _imp(2, 'Second', calls=5)])
        assert [r['name'] for r in board] == ['First', 'Second']

    def test_row_shape(self):
        row = fold_leaderboard([_imp(7, 'A', proposals=2, won_count=1, won_revenue=99.5)])[0]
        assert row['import_id'] == 7
        assert row['proposals'] == 2
        assert row['won_deals'] == 1
        assert row['won_revenue'] == 99.5

    def test_missing_name(self):
        assert fold_leaderboard([_imp(1, None)])[0]['name'] == 'Unknown'


class TestFoldPipeline:

    def test_every_stage_present_in_order(self):
        summary = fold_pipeline_summary([])
        assert [s['stage'] for s in summary] == ['cold', 'contacted', 'meeting', 'proposal', 'won', 'lost']
        assert all(s['count'] == 0 and s['value'] == 0.0 for s in summary)

    def test_counts_and_values(self):
        summary = fold_pipeline_summary([
            {'stage': 'won', 'deal_value': 1000.0},
            {'stage': 'cold', 'deal_value': 0.0},
            {'stage': 'won', 'deal_value': 250.0},
        ])
        by_stage = {s['stage']: s for s in summary}
        assert by_stage['won'] == {'stage': 'won', 'count': 2, 'value': 1250.0}
        assert by_stage['cold']['count'] == 1

    def test_board_columns_hold_prospects(self):
        prospects = [{'id': 1, 'stage': 'meeting', 'deal_value': 10.0}]
        board = fold_pipeline_board(prospects)
        meeting = next(c for c in board if c['stage'] == 'meeting')
        assert meeting['prospects'] == prospects
        assert meeting['count'] == 1


class TestFoldMemberProgress:

    def _pcts(self, card):
        return {a['type']: (a['pct'], a['band']) for a in card['activities']}

    def test_bands(self):
        card = fold_member_progress([_imp(1, 'A', emails=50, calls=35, meetings=6, proposals=0)])[0]
        assert self._pcts(card) == {
            'emails': (100.0, 'green'),
            'calls': (70.0, 'yellow'),
            'meetings': (60.0, 'red'),
            'proposals': (0.0, 'red'),
        }

    def test_capped_at_100(self):
        card = fold_member_progress([_imp(1, 'A', emails=120)])[0]
        assert self._pcts(card)['emails'] == (100.0, 'green')

    def test_zero_target_divides_by_one(self):
        imp = _imp(1, 'A', meetings=1, targets={'emails': 50, 'calls': 50, 'meetings': 0, 'proposals': 5})
        card = fold_member_progress([imp])[0]
        meetings = next(a for a in card['activities'] if a['type'] == 'meetings')
        assert meetings['target'] == 0
        assert meetings['pct'] == 100.0

    @pytest.mark.parametrize('pct,band', [(100, 'green'), (99.9, 'yellow'), (70, 'yellow'), (69.9, 'red')])
    def test_progress_band(self, pct, band):
        assert progress_band(pct) == band


class TestFindDuplicateCompanies:

    def test_case_and_whitespace_insensitive(self):
        dupes = find_duplicate_companies([
            {'id': 1, 'company': 'Acme', 'team_member_id': 1},
            {'id': 2, 'company': ' ACME ', 'team_member_id': 2},
            {'id': 3, 'company': 'Globex', 'team_member_id': 1},
        ])
        assert list(dupes) == ['acme']
        assert dupes['acme']['prospect_ids'] == [1, 2]
        assert dupes['acme']['team_member_ids'] == [1, 2]

    def test_same_member_twice_is_duplicate(self):
        dupes = find_duplicate_companies([
            {'id': 1, 'company': 'Acme', 'team_member_id': 1},
            {'id': 2, 'company': 'acme', 'team_member_id': 1},
        ])
        assert dupes['acme']['team_member_ids'] == [1]

    def test_single_company_not_duplicate(self):
        assert find_duplicate_companies([{'id': 1, 'company': 'Acme', 'team_member_id': 1}]) == {}

    def test_blank_company_never_duplicate(self):
        assert find_duplicate_companies([
            {'id': 1, 'company': '', 'team_member_id': 1},
            {'id': 2, 'company': '  ', 'team_member_id': 2},
        ]) == {}


# ---------------------------------------------------------------------------
# Store-backed reports
# ---------------------------------------------------------------------------

class TestStoreReports:

    @pytest.fixture
    def team(self, make_document, make_activities):
        a = resolve_member('A')
        b = resolve_member('B')
        import_document(a.id, make_document(name='A', activities=make_activities(emails=10, calls=5)))
        import_document(b.id, make_document(
            name='B',
            activities=make_activities(emails=20, calls=1, meetings=2),
            prospects=[{'company': 'ACME', 'stage': 'contacted', 'dealValue': 300}],
        ))
        return a, b

    def test_leaderboard(self, team):
        assert [(r['name'], r['total']) for r in get_leaderboard()] == [('B', 23), ('A', 15)]

    def test_team_stats(self, team):
        stats = get_team_stats()
        assert stats['emails'] == 30
        assert stats['member_count'] == 2
        assert stats['prospects'] == 3
        assert stats['won_deals'] == 1
        assert stats['won_revenue'] == 1000.0

    def test_only_current_imports_count(self, team, make_document, make_activities):
        a, _ = team
        import_document(a.id, make_document(name='A', activities=make_activities(emails=1)))
        assert get_team_stats()['emails'] == 21

    def test_pipeline_summary(self, team):
        by_stage = {s['stage']: s for s in get_pipeline_summary()}
        assert by_stage['won'] == {'stage': 'won', 'count': 1, 'value': 1000.0}
        assert by_stage['contacted']['value'] == 300.0

    def test_won_revenue_matches_prospect_rows(self, team):
        won = next(s for s in get_pipeline_summary() if s['stage'] == 'won')
        assert won['value'] == get_team_stats()['won_revenue']

    def test_pipeline_board_for_member(self, team):
        _, b = team
        board = get_pipeline_board(b.id)
        assert sum(c['count'] for c in board) == 1

    def test_member_progress(self, team):
        cards = get_member_progress()
        assert sorted(c['name'] for c in cards) == ['A', 'B']

    def test_deleted_member_excluded(self, team):
        a, _ = team
        delete_team_member(a.id)
        assert [r['name'] for r in get_leaderboard()] == ['B']
        assert get_team_stats()['member_count'] == 1

    def test_deleted_current_import_excluded(self, team):
        from mission_control.services.imports import list_current_imports
        current = {c['team_member_name']: c['id'] for c in list_current_imports()}
        delete_import(current['A'])
        assert get_team_stats()['emails'] == 20

    def test_empty_store(self):
        assert get_leaderboard() == []
        assert get_team_stats()['member_count'] == 0

    def test_store_failure_propagates(self):
        with patch('mission_control.services.reports.list_current_imports',
                   side_effect=StoreFailure('db down')):
            with pytest.raises(StoreFailure):
                get_team_stats()
