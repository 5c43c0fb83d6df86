#!/usr/bin/env python3
"""
Seed test data for verifying the dashboard locally.

Builds tracker exports for a small team and pushes them through the real
import pipeline, covering:
  1. A member with two exports (older one restorable from history)
  2. A member with archived weeks and a won deal
  3. A company pursued by two members (duplicate contact)

Usage:
    python scripts/seed_test_data.py          # seed all scenarios
    python scripts/seed_test_data.py --clear  # remove seeded members first

Requires: DATABASE_URL set (or defaults to sqlite:///local.db).
"""
import sys
import os
import argparse
from datetime import datetime, timezone, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mission_control import create_app
from mission_control.database import get_session, engine, Base
from mission_control.models.team_member import TeamMember
from mission_control.services.imports import import_document
from mission_control.services.members import delete_team_member, resolve_member


# Seeded members are recognisable by this suffix so --clear leaves real data alone
SEED_SUFFIX = ' (seed)'

TEAM = [
    {'name': 'Jane Morrison', 'emails': 42, 'calls': 30, 'meetings': 6, 'proposals': 2},
    {'name': 'Carlos Reyes',  'emails': 55, 'calls': 12, 'meetings': 11, 'proposals': 5},
    {'name': 'Priya Sharma',  'emails': 18, 'calls': 44, 'meetings': 3, 'proposals': 1},
]

COMPANIES = [
    ('Acme Logistics', 'Dana Fox', 'cold', 0),
    ('Northwind Traders', 'Ian Holt', 'contacted', 12000),
    ('Globex', 'Mara Singh', 'meeting', 8000),
    ('Initech', 'Bill Lumbergh', 'proposal', 25000),
    ('Umbrella Corp', 'Alice Abernathy', 'won', 40000),
    ('Hooli', 'Gavin Belson', 'lost', 15000),
]


def _iso(dt):
    return dt.isoformat().replace('+00:00', 'Z')


def make_export(member, week_start, offset=0, archived_weeks=0, companies=COMPANIES):
    """Build a tracker export document shaped like the real client writes it."""
    now = datetime.now(timezone.utc)
    activities = []
    for activity_type in ('emails', 'calls', 'meetings', 'proposals'):
        for i in range(max(0, member[activity_type] - offset)):
            activities.append({
                'type': activity_type,
                'name': f'{activity_type[:-1].title()} #{i + 1}',
                'notes': '',
                'timestamp': _iso(now - timedelta(hours=i)),
            })

    archived = []
    for week in range(1, archived_weeks + 1):
        week_of = (week_start - timedelta(weeks=week)).isoformat()
        archived.extend({
            'type': 'calls',
            'name': f'Call #{i + 1}',
            'notes': 'archived',
            'timestamp': _iso(now - timedelta(weeks=week, hours=i)),
            'weekOf': week_of,
        } for i in range(10))

    prospects = []
    for company, contact, stage, value in companies:
        prospect = {
            'company': company,
            'contact': contact,
            'email': f"{contact.split()[0].lower()}@{company.split()[0].lower()}.example",
            'phone': '',
            'stage': stage,
            'dealValue': value,
            'createdAt': _iso(now - timedelta(days=20)),
            'lastTouch': _iso(now - timedelta(days=1)),
        }
        if stage == 'won':
            prospect['wonAt'] = _iso(now - timedelta(days=2))
        prospects.append(prospect)

    return {
        'userName': member['name'] + SEED_SUFFIX,
        'exportedAt': _iso(now),
        'currentWeekStart': week_start.isoformat(),
        'targets': {'emails': 50, 'calls': 40, 'meetings': 10, 'proposals': 4},
        'activities': activities,
        'archivedActivities': archived,
        'prospects': prospects,
    }


def seed():
    today = datetime.now(timezone.utc).date()
    week_start = today - timedelta(days=today.weekday())

    jane, carlos, priya = TEAM

    # 1. Two exports for Jane; the first stays in history for restore
    member = resolve_member(jane['name'] + SEED_SUFFIX)
    first = import_document(member.id, make_export(jane, week_start, offset=10))
    second = import_document(member.id, make_export(jane, week_start))
    print(f'  [1] {member.name}: import {first.id} (history), {second.id} (current)')

    # 2. Carlos with three archived weeks
    member = resolve_member(carlos['name'] + SEED_SUFFIX)
    record = import_document(member.id, make_export(carlos, week_start, archived_weeks=3))
    print(f'  [2] {member.name}: import {record.id}, won ${record.won_revenue:,.0f}')

    # 3. Priya also works Acme Logistics
    member = resolve_member(priya['name'] + SEED_SUFFIX)
    record = import_document(member.id, make_export(
        priya, week_start, companies=[('ACME Logistics ', 'Dana Fox', 'contacted', 5000)],
    ))
    print(f'  [3] {member.name}: import {record.id} (duplicate company)')


def clear_seeded_data():
    """Delete every seeded team member (cascades to their imports)."""
    session = get_session()
    try:
        ids = [m.id for m in session.query(TeamMember).filter(
            TeamMember.name.like(f'%{SEED_SUFFIX}'),
            TeamMember.is_active.is_(True),
        ).all()]
    finally:
        session.close()

    if not ids:
        print('No seeded data found.')
        return
    for member_id in ids:
        delete_team_member(member_id)
    print(f'Cleared {len(ids)} seeded team members.')


def main():
    parser = argparse.ArgumentParser(description='Seed test data for dashboard verification')
    parser.add_argument('--clear', action='store_true', help='Clear seeded data before (or instead of) seeding')
    parser.add_argument('--clear-only', action='store_true', help='Only clear, do not re-seed')
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        # Ensure tables exist (for SQLite local dev)
        Base.metadata.create_all(engine)

        if args.clear or args.clear_only:
            clear_seeded_data()
            if args.clear_only:
                return

        print('Seeding test data...')
        seed()
        print('\nDone! Try http://localhost:8080/api/reports/leaderboard')


if __name__ == '__main__':
    main()
