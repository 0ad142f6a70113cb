"""Mail template configuration.

The subject and body templates are editable module configuration kept in
a YAML file::

    template_subject: "New content on Loop"
    template_body: |
      Hi [user:display-name],
      ...

Both templates may use ``[user:*]`` and ``[os2loop_mail_notifications:*]``
tokens.  Built-in defaults apply when the file does not exist.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

from loop_notifications.core.settings import get_settings

DEFAULT_TEMPLATE_SUBJECT = "News from Loop"
DEFAULT_TEMPLATE_BODY = (
    "Hi [user:display-name],\n"
    "\n"
    "Here is what happened in the content you follow:\n"
    "\n"
    "[os2loop_mail_notifications:messages_with_headings]"
)

_REQUIRED_FIELDS: frozenset[str] = frozenset({"template_subject", "template_body"})


@dataclass(frozen=True)
class NotificationConfig:
    template_subject: str = DEFAULT_TEMPLATE_SUBJECT
    template_body: str = DEFAULT_TEMPLATE_BODY


def load_notification_config(path: str | Path) -> NotificationConfig:
    """Load the mail templates from a YAML file.

    Raises
    ------
    ValueError
        If the document is not a mapping or a template is missing or not a string.
    """
    path = Path(path)
    if not path.is_file():
        return NotificationConfig()

    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a YAML mapping, got {type(data).__name__}")

    missing = _REQUIRED_FIELDS - data.keys()
    if missing:
        raise ValueError(f"{path}: missing required fields: {sorted(missing)}")

    for name in sorted(_REQUIRED_FIELDS):
        if not isinstance(data[name], str):
            raise ValueError(f"{path}: {name} must be a string")

    return NotificationConfig(
        template_subject=data["template_subject"],
        template_body=data["template_body"],
    )


@lru_cache(maxsize=1)
def get_notification_config() -> NotificationConfig:
    return load_notification_config(get_settings().notifications_config_path)
