"""End-to-end tests for the notification job.

Only SMTP is mocked (I/O boundary).  Queries run against in-memory SQLite.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from loop_notifications.core.constants import FLAG_SUBSCRIPTION_NODE, FLAG_SUBSCRIPTION_TERM
from loop_notifications.db.models import Flagging, Message, Node, TaxonomyTerm, User
from loop_notifications.notification.config import NotificationConfig
from loop_notifications.notification.helper import Helper, build_helper
from loop_notifications.notification.mail_helper import MailHelper
from loop_notifications.notification.mailer import Mailer
from loop_notifications.notification.tokens import Token

_NOW = datetime(2026, 10, 19, 6, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fixtures / helpers
# ---------------------------------------------------------------------------

def _add_message(db, mid, template, nid, owner, minutes_ago, text=None):
    db.add(Message(
        mid=mid,
        template=template,
        created=_NOW - timedelta(minutes=minutes_ago),
        uid=owner,
        node_nid=nid,
        text={"en": [text or f'Message {mid}: <a href="/node/{nid}">Node {nid}</a>']},
    ))


@pytest.fixture()
def site(db_session):
    """Users 1-4, nodes 10/20/30, term 5 on node 30."""
    db = db_session
    db.add_all([
        User(uid=1, name="anna", mail="anna@example.com"),
        User(uid=2, name="bo", mail="bo@example.com"),
        User(uid=3, name="carl", mail="carl@example.com"),
        User(uid=4, name="dina", mail="dina@example.com", preferred_langcode="da"),
        TaxonomyTerm(tid=5, vid="os2loop_subject", name="Care"),
    ])
    db.flush()
    db.add_all([
        Node(nid=10, type="os2loop_documents_document", title="Node 10"),
        Node(nid=20, type="os2loop_question", title="Node 20"),
        Node(nid=30, type="os2loop_question", title="Node 30", shared_subject_tid=5),
    ])
    db.flush()
    return db


def _subscribe(db, uid, flag_id, entity_id):
    entity_type = "node" if flag_id == FLAG_SUBSCRIPTION_NODE else "taxonomy_term"
    db.add(Flagging(flag_id=flag_id, uid=uid, entity_type=entity_type, entity_id=entity_id))
    db.flush()


def _recording_helper(db) -> tuple[Helper, MagicMock]:
    mail_helper = MagicMock(spec=MailHelper)
    mail_helper.send_notification.return_value = True
    return Helper(db, mail_helper), mail_helper


def _sent(mail_helper: MagicMock) -> dict[int, dict]:
    return {
        c.args[0].uid: {t: {nid: m.mid for nid, m in msgs.items()} for t, msgs in c.args[1].items()}
        for c in mail_helper.send_notification.call_args_list
    }


# ===========================================================================
# Job
# ===========================================================================

class TestSendNotifications:
    def test_subscriber_gets_only_subscribed_node(self, site):
        _subscribe(site, 1, FLAG_SUBSCRIPTION_NODE, 10)
        _add_message(site, 1, "os2loop_message_document_added", 10, owner=3, minutes_ago=5)
        _add_message(site, 2, "os2loop_message_comment_changed", 20, owner=3, minutes_ago=1)
        site.commit()

        helper, mail_helper = _recording_helper(site)
        helper.cron()

        # User 2 holds no subscription and receives nothing.
        assert _sent(mail_helper) == {1: {"os2loop_message_document_added": {10: 1}}}

    def test_own_messages_never_notified(self, site):
        _subscribe(site, 1, FLAG_SUBSCRIPTION_NODE, 10)
        _add_message(site, 1, "os2loop_message_document_added", 10, owner=1, minutes_ago=5)
        site.commit()

        helper, mail_helper = _recording_helper(site)
        helper.send_notifications()

        mail_helper.send_notification.assert_not_called()

    def test_term_subscription_matches_shared_subject(self, site):
        _subscribe(site, 2, FLAG_SUBSCRIPTION_TERM, 5)
        _add_message(site, 1, "os2loop_message_question_added", 30, owner=1, minutes_ago=5)
        _add_message(site, 2, "os2loop_message_question_added", 20, owner=1, minutes_ago=4)
        site.commit()

        helper, mail_helper = _recording_helper(site)
        helper.send_notifications()

        assert _sent(mail_helper) == {2: {"os2loop_message_question_added": {30: 1}}}

    def test_duplicates_collapse_to_newest(self, site):
        _subscribe(site, 1, FLAG_SUBSCRIPTION_NODE, 10)
        _add_message(site, 1, "os2loop_message_comment_changed", 10, owner=2, minutes_ago=30)
        _add_message(site, 2, "os2loop_message_comment_changed", 10, owner=3, minutes_ago=10)
        _add_message(site, 3, "os2loop_message_comment_changed", 10, owner=2, minutes_ago=20)
        site.commit()

        helper, mail_helper = _recording_helper(site)
        helper.send_notifications()

        assert _sent(mail_helper) == {1: {"os2loop_message_comment_changed": {10: 2}}}

    def test_templates_outside_allow_list_ignored(self, site):
        _subscribe(site, 1, FLAG_SUBSCRIPTION_NODE, 10)
        _add_message(site, 1, "os2loop_message_user_login", 10, owner=2, minutes_ago=5)
        site.commit()

        helper, mail_helper = _recording_helper(site)
        helper.send_notifications()

        mail_helper.send_notification.assert_not_called()

    def test_message_with_deleted_node_ignored(self, site):
        _subscribe(site, 1, FLAG_SUBSCRIPTION_NODE, 10)
        site.add(Message(mid=1, template="os2loop_message_document_added", created=_NOW, uid=2, node_nid=None))
        site.commit()

        helper, mail_helper = _recording_helper(site)
        helper.send_notifications()

        mail_helper.send_notification.assert_not_called()

    def test_subscribers_loaded_once_each(self, site):
        _subscribe(site, 1, FLAG_SUBSCRIPTION_NODE, 10)
        _subscribe(site, 1, FLAG_SUBSCRIPTION_NODE, 20)
        _subscribe(site, 1, FLAG_SUBSCRIPTION_TERM, 5)
        site.commit()

        helper, _ = _recording_helper(site)
        assert [u.uid for u in helper.get_users()] == [1]

    def test_failed_send_does_not_stop_run(self, site):
        _subscribe(site, 1, FLAG_SUBSCRIPTION_NODE, 10)
        _subscribe(site, 2, FLAG_SUBSCRIPTION_NODE, 10)
        _add_message(site, 1, "os2loop_message_document_added", 10, owner=3, minutes_ago=5)
        site.commit()

        helper, mail_helper = _recording_helper(site)
        mail_helper.send_notification.return_value = False
        helper.send_notifications()

        assert mail_helper.send_notification.call_count == 2

    def test_second_run_sends_same_digest_again(self, site):
        _subscribe(site, 1, FLAG_SUBSCRIPTION_NODE, 10)
        _add_message(site, 1, "os2loop_message_document_added", 10, owner=3, minutes_ago=5)
        site.commit()

        helper, mail_helper = _recording_helper(site)
        helper.cron()
        first = _sent(mail_helper)
        mail_helper.send_notification.reset_mock()
        helper.cron()

        assert _sent(mail_helper) == first


# ===========================================================================
# Full pipeline with SMTP mocked
# ===========================================================================

class TestEndToEndMail:
    @patch("loop_notifications.notification.mailer.smtplib.SMTP")
    def test_digest_mail_sent_per_subscriber(self, mock_smtp_cls, site):
        mock_server = MagicMock()
        mock_smtp_cls.return_value.__enter__ = MagicMock(return_value=mock_server)
        mock_smtp_cls.return_value.__exit__ = MagicMock(return_value=False)

        _subscribe(site, 1, FLAG_SUBSCRIPTION_NODE, 10)
        _subscribe(site, 4, FLAG_SUBSCRIPTION_TERM, 5)
        _add_message(site, 1, "os2loop_message_document_added", 10, owner=2, minutes_ago=5,
                     text='New document: <a href="/node/10">Node 10</a>')
        _add_message(site, 2, "os2loop_message_answer_added", 30, owner=2, minutes_ago=3,
                     text='New answer: <a href="/node/30">Node 30</a>')
        site.commit()

        mailer = Mailer(smtp_host="localhost")
        config = NotificationConfig(
            template_subject="Loop digest",
            template_body="[os2loop_mail_notifications:messages_with_headings]",
        )
        Helper(site, MailHelper(config, Token.default(), mailer)).cron()

        recipients = [c.args[1] for c in mock_server.sendmail.call_args_list]
        assert recipients == [["anna@example.com"], ["dina@example.com"]]

    def test_build_helper_uses_settings(self, db_session, monkeypatch):
        from loop_notifications.core.settings import get_settings

        monkeypatch.setenv("SMTP_HOST", "relay.example.com")
        monkeypatch.setenv("SMTP_PORT", "2525")
        get_settings.cache_clear()
        try:
            helper = build_helper(db_session)
        finally:
            get_settings.cache_clear()

        assert helper.mail_helper.mailer.smtp_host == "relay.example.com"
        assert helper.mail_helper.mailer.smtp_port == 2525
