#!/usr/bin/env python3
"""Run the mail notification job once.

Meant to be called from a system crontab, e.g.::

    0 6 * * * cd /srv/loop-notifications && python scripts/run_cron.py
"""
from __future__ import annotations

import sys

# Ensure project root is on sys.path
sys.path.insert(0, ".")

from loop_notifications.core.logging import setup_logging
from loop_notifications.db.session import get_session_factory
from loop_notifications.notification.helper import build_helper


def main() -> None:
    setup_logging()
    with get_session_factory()() as session:
        build_helper(session).cron()


if __name__ == "__main__":
    main()
