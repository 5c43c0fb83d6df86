"""
Centralized configuration — env vars and dashboard constants.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Database ─────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── Uploads ──────────────────────────────────────────────────────────────────
MAX_UPLOAD_MB = int(os.getenv('MAX_UPLOAD_MB', '5'))

# ── Weekly activity goals used when an export carries no targets ─────────────
DEFAULT_TARGETS = {
    'emails': 50,
    'calls': 50,
    'meetings': 10,
    'proposals': 5,
}

# ── Member progress bands (percent of target) ────────────────────────────────
PROGRESS_GREEN_PCT = 100
PROGRESS_YELLOW_PCT = 70

# Week marker for archived activities exported without one
UNKNOWN_WEEK = 'unknown'
