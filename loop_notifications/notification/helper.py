"""Notification job.

Runs once per cron trigger:

1. Load every message created from one of ``MESSAGE_TEMPLATE_NAMES``,
   newest first.
2. Load every user holding a node or term subscription flag.
3. For each user, keep the relevant messages, group them and send one
   digest mail.

The job keeps no state between runs; running it twice sends the same
digests twice.  The result of each send is not inspected.
"""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from loop_notifications.core.constants import MESSAGE_TEMPLATE_NAMES, SUBSCRIPTION_FLAG_NAMES
from loop_notifications.core.settings import get_settings
from loop_notifications.db.models import Message, User
from loop_notifications.db.repositories import FlaggingRepository, MessageRepository, UserRepository
from loop_notifications.notification.config import get_notification_config
from loop_notifications.notification.mail_helper import MailHelper
from loop_notifications.notification.mailer import Mailer
from loop_notifications.notification.matching import get_user_messages, group_messages
from loop_notifications.notification.subscriptions import SubscriptionIndex
from loop_notifications.notification.tokens import Token

logger = logging.getLogger(__name__)


class Helper:
    def __init__(self, db: Session, mail_helper: MailHelper) -> None:
        self.messages = MessageRepository(db)
        self.users = UserRepository(db)
        self.flaggings = FlaggingRepository(db)
        self.mail_helper = mail_helper

    def cron(self) -> None:
        self.send_notifications()

    def send_notifications(self) -> None:
        messages = self.get_messages()
        users = self.get_users()
        subscriptions = SubscriptionIndex(self.flaggings)
        logger.info(
            "Sending notifications: %d candidate messages, %d subscribers",
            len(messages),
            len(users),
        )

        for user in users:
            user_messages = get_user_messages(user, messages, subscriptions)
            if not user_messages:
                continue
            grouped = group_messages(user_messages)
            self.mail_helper.send_notification(user, grouped)

    def get_messages(self) -> list[Message]:
        return self.messages.list_by_templates(MESSAGE_TEMPLATE_NAMES)

    def get_users(self) -> list[User]:
        """Return users that subscribe to content or taxonomy terms."""
        return self.users.load_multiple(self.flaggings.flagging_uids(SUBSCRIPTION_FLAG_NAMES))


def build_helper(db: Session) -> Helper:
    """Wire a ``Helper`` from process settings and the template config."""
    settings = get_settings()
    mailer = Mailer(
        smtp_host=settings.smtp_host,
        smtp_port=settings.smtp_port,
        mail_from=settings.mail_from,
    )
    mail_helper = MailHelper(
        get_notification_config(),
        Token.default(),
        mailer,
        default_langcode=settings.default_langcode,
    )
    return Helper(db, mail_helper)
