"""Notification mail composition.

``MailHelper`` turns a user's grouped messages into the two digest texts,
exposes them as ``[os2loop_mail_notifications:*]`` tokens and asks the
mail manager to send the notification mail built from the configured
subject and body templates.
"""
from __future__ import annotations

import logging

from loop_notifications.core.constants import MODULE, NOTIFICATION_MAIL, TOKEN_TYPE
from loop_notifications.db.models import User
from loop_notifications.notification.config import NotificationConfig
from loop_notifications.notification.mailer import Mailer
from loop_notifications.notification.matching import GroupedMessages
from loop_notifications.notification.rendering import (
    build_flat_digest,
    build_heading_digest,
    build_sections,
)
from loop_notifications.notification.tokens import Markup, Token

logger = logging.getLogger(__name__)


class MailHelper:
    def __init__(
        self,
        config: NotificationConfig,
        token: Token,
        mailer: Mailer,
        default_langcode: str = "en",
    ) -> None:
        self.config = config
        self.token = token
        self.mailer = mailer
        self.default_langcode = default_langcode

        self.token.register(TOKEN_TYPE, self.tokens)
        self.mailer.register(MODULE, self.mail)

    # -- mail builder -------------------------------------------------------

    def mail(self, key: str, message: dict, params: dict) -> None:
        """Fill in subject and body of the notification mail."""
        if key != NOTIFICATION_MAIL:
            return

        data = {
            "user": params["user"],
            TOKEN_TYPE: {
                "messages": Markup(params["messages"]),
                "messages_with_headings": Markup(params["messages_with_headings"]),
            },
        }
        message["subject"] = self.render_template(self.config.template_subject, data)
        message["body"].append(self.render_template(self.config.template_body, data))

    # -- send ---------------------------------------------------------------

    def send_notification(self, user: User, grouped_messages: GroupedMessages) -> bool:
        """Send the digest of *grouped_messages* to *user*.

        Returns True if the mail was sent.
        """
        langcode = user.preferred_langcode or self.default_langcode

        sections = build_sections(grouped_messages, langcode, self.default_langcode)
        params: dict = dict(sections)
        params["messages"] = build_flat_digest(sections)
        params["messages_with_headings"] = build_heading_digest(
            grouped_messages, langcode, self.default_langcode
        )
        params["user"] = user

        logger.debug(
            "Sending notification to user %s with %d sections", user.uid, len(sections)
        )
        result = self.mailer.mail(
            MODULE, NOTIFICATION_MAIL, user.mail, langcode, params, reply_to=None, send=True
        )
        return result["result"] is True

    # -- tokens -------------------------------------------------------------

    def render_template(self, template: str, data: dict) -> str:
        return self.token.replace(template, data)

    def tokens(self, token_type: str, tokens: dict[str, str], data: dict) -> dict[str, object]:
        """Replace tokens related to mail notifications."""
        replacements: dict[str, object] = {}
        if token_type == TOKEN_TYPE and token_type in data:
            for name, original in tokens.items():
                if name in data[token_type]:
                    replacements[original] = data[token_type][name]
        return replacements

    def token_info(self) -> dict:
        return {
            "types": {
                TOKEN_TYPE: {
                    "name": "Mail notifications",
                    "description": "Tokens related to mail notifications.",
                    "needs-data": TOKEN_TYPE,
                },
            },
            "tokens": {
                TOKEN_TYPE: {
                    "messages": {
                        "name": "The messages",
                        "description": "The messages.",
                    },
                    "messages_with_headings": {
                        "name": "The messages with headings",
                        "description": "The messages in sections with headings.",
                    },
                },
            },
        }
