"""Per-run index of user subscriptions.

The flagging table is scanned once per flag type, on first access, and
the resulting ``uid -> [entity_id, ...]`` map is reused for every user in
the run.  An index must not outlive the run that created it.
"""
from __future__ import annotations

import logging

from loop_notifications.core.constants import FLAG_SUBSCRIPTION_NODE, FLAG_SUBSCRIPTION_TERM
from loop_notifications.db.models import User
from loop_notifications.db.repositories import FlaggingRepository

logger = logging.getLogger(__name__)


class SubscriptionIndex:
    """Lazily built map from user id to subscribed node and term ids."""

    def __init__(self, flaggings: FlaggingRepository) -> None:
        self._flaggings = flaggings
        self._user_node_ids: dict[int, list[int]] | None = None
        self._user_term_ids: dict[int, list[int]] | None = None

    def _build(self, flag_id: str) -> dict[int, list[int]]:
        index: dict[int, list[int]] = {}
        for uid, entity_id in self._flaggings.targets(flag_id):
            index.setdefault(uid, []).append(entity_id)
        logger.debug("Indexed %s subscriptions for %d users", flag_id, len(index))
        return index

    def node_ids(self, user: User) -> list[int]:
        """Return ids of nodes *user* subscribes to."""
        if self._user_node_ids is None:
            self._user_node_ids = self._build(FLAG_SUBSCRIPTION_NODE)
        return self._user_node_ids.get(user.uid, [])

    def term_ids(self, user: User) -> list[int]:
        """Return ids of taxonomy terms *user* subscribes to."""
        if self._user_term_ids is None:
            self._user_term_ids = self._build(FLAG_SUBSCRIPTION_TERM)
        return self._user_term_ids.get(user.uid, [])
