"""Mail manager.

Modules register a builder per module key.  ``Mailer.mail`` composes a
message dict, lets the module's builder fill in subject and body for the
given mail key, and delivers the result through a local SMTP relay.

No retries: a failed delivery is logged and reported as
``result == False``.  Recipient addresses are never logged.
"""
from __future__ import annotations

import logging
import smtplib
from collections.abc import Callable
from email.mime.text import MIMEText

logger = logging.getLogger(__name__)

MailBuilder = Callable[[str, dict, dict], None]


class Mailer:
    """Compose mails through registered builders and send them via SMTP."""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int = 25,
        mail_from: str = "noreply@loop.local",
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.mail_from = mail_from
        self._builders: dict[str, MailBuilder] = {}

    def register(self, module: str, builder: MailBuilder) -> None:
        self._builders[module] = builder

    # -- compose and send ---------------------------------------------------

    def mail(
        self,
        module: str,
        key: str,
        to: str | None,
        langcode: str,
        params: dict | None = None,
        reply_to: str | None = None,
        send: bool = True,
    ) -> dict:
        """Build the mail *key* of *module* and send it to *to*.

        Returns the message dict.  ``result`` is ``True`` when delivered,
        ``False`` when delivery failed and ``None`` when nothing was sent
        because *send* was false.
        """
        message: dict = {
            "id": f"{module}_{key}",
            "module": module,
            "key": key,
            "to": to,
            "from": self.mail_from,
            "reply-to": reply_to,
            "langcode": langcode,
            "params": params or {},
            "send": send,
            "subject": "",
            "body": [],
            "result": None,
        }

        builder = self._builders.get(module)
        if builder is None:
            logger.error("No mail builder registered for module %s", module)
            message["result"] = False
            return message

        builder(key, message, message["params"])

        if not message["send"]:
            return message

        if not to:
            logger.warning("Mail %s has no recipient, not sent", message["id"])
            message["result"] = False
            return message

        message["result"] = self._deliver(message)
        return message

    def _deliver(self, message: dict) -> bool:
        msg = MIMEText("\n\n".join(message["body"]), "plain", "utf-8")
        msg["Subject"] = message["subject"]
        msg["From"] = message["from"]
        msg["To"] = message["to"]
        msg["Content-Language"] = message["langcode"]
        if message["reply-to"]:
            msg["Reply-To"] = message["reply-to"]

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.sendmail(message["from"], [message["to"]], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Unable to send mail %s: %s", message["id"], exc)
            return False

        logger.info("Sent mail %s", message["id"])
        return True
