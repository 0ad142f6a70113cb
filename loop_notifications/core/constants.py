"""Identifiers shared by the notification job, the mail manager and the token renderer.

Message templates
-----------------
Only messages created from one of ``MESSAGE_TEMPLATE_NAMES`` are candidates
for a digest.  The template name doubles as the digest section key.

Subscription flags
------------------
A user subscribes to a node or a taxonomy term by flagging it with
``FLAG_SUBSCRIPTION_NODE`` or ``FLAG_SUBSCRIPTION_TERM``.
"""
from __future__ import annotations

MODULE = "os2loop_mail_notifications"
NOTIFICATION_MAIL = "os2loop_mail_notifications_notification"

# Token namespace holding the rendered digests.
TOKEN_TYPE = MODULE

# ---------------------------------------------------------------------------
# Message templates
# ---------------------------------------------------------------------------

MESSAGE_TEMPLATE_NAMES: tuple[str, ...] = (
    "os2loop_message_answer_added",
    "os2loop_message_collection_added",
    "os2loop_message_collection_edit",
    "os2loop_message_comment_changed",
    "os2loop_message_document_added",
    "os2loop_message_document_edited",
    "os2loop_message_question_added",
    "os2loop_message_question_edited",
)

# ---------------------------------------------------------------------------
# Subscription flags
# ---------------------------------------------------------------------------

FLAG_SUBSCRIPTION_NODE = "os2loop_subscription_node"
FLAG_SUBSCRIPTION_TERM = "os2loop_subscription_term"

SUBSCRIPTION_FLAG_NAMES: tuple[str, ...] = (
    FLAG_SUBSCRIPTION_NODE,
    FLAG_SUBSCRIPTION_TERM,
)
