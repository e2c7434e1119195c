"""Shared test setup.

Settings are read at import time, so the environment must be prepared
before any ``src`` / ``config`` module is imported.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("DEPOSIT_SETTLE_DELAY_SECONDS", "0")
os.environ.setdefault("WITHDRAW_SETTLE_DELAY_SECONDS", "0")
os.environ.setdefault("SETTLEMENT_POLL_INTERVAL_SECONDS", "0.2")
