"""Subscription matching and message grouping.

A message is relevant to a user when the user did not create it and the
node it refers to is either subscribed directly or carries a shared
subject term the user subscribes to.

Grouping keeps one message per (template, node) pair.  Input must be
sorted newest first, so the kept message is the most recent one.

Note: an "edited" message is not dropped when a "created" message for the
same node is part of the same digest.
"""
from __future__ import annotations

from collections.abc import Iterable

from loop_notifications.db.models import Message, Node, User
from loop_notifications.notification.subscriptions import SubscriptionIndex

GroupedMessages = dict[str, dict[int, Message]]


def get_message_node(message: Message) -> Node | None:
    """Return the node *message* refers to, if it still exists."""
    return message.node


def is_relevant(user: User, message: Message, subscriptions: SubscriptionIndex) -> bool:
    # Exclude messages generated by own actions.
    if message.uid is not None and message.uid == user.uid:
        return False

    node = get_message_node(message)
    if node is None:
        return False

    if node.nid in subscriptions.node_ids(user):
        return True

    subject_tid = node.shared_subject_tid
    if subject_tid is not None and subject_tid in subscriptions.term_ids(user):
        return True

    return False


def get_user_messages(
    user: User,
    messages: Iterable[Message],
    subscriptions: SubscriptionIndex,
) -> list[Message]:
    """Return the messages relevant to *user*, preserving input order."""
    return [m for m in messages if is_relevant(user, m, subscriptions)]


def group_messages(messages: Iterable[Message]) -> GroupedMessages:
    """Group *messages* by template and node, keeping the first per pair."""
    seen: dict[str, set[int]] = {}
    grouped: GroupedMessages = {}
    for message in messages:
        node = get_message_node(message)
        if node is None:
            continue
        seen_nids = seen.setdefault(message.template, set())
        if node.nid not in seen_nids:
            grouped.setdefault(message.template, {})[node.nid] = message
        seen_nids.add(node.nid)
    return grouped
