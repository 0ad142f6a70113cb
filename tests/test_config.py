"""Tests for loop_notifications/notification/config.py."""
from __future__ import annotations

import pytest

from loop_notifications.notification.config import (
    DEFAULT_TEMPLATE_BODY,
    DEFAULT_TEMPLATE_SUBJECT,
    get_notification_config,
    load_notification_config,
)


class TestLoadNotificationConfig:
    def test_loads_templates(self, tmp_path):
        path = tmp_path / "mail.yaml"
        path.write_text(
            'template_subject: "News for [user:name]"\n'
            "template_body: |\n"
            "  [os2loop_mail_notifications:messages]\n",
            encoding="utf-8",
        )

        config = load_notification_config(path)

        assert config.template_subject == "News for [user:name]"
        assert config.template_body == "[os2loop_mail_notifications:messages]\n"

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_notification_config(tmp_path / "absent.yaml")
        assert config.template_subject == DEFAULT_TEMPLATE_SUBJECT
        assert config.template_body == DEFAULT_TEMPLATE_BODY

    def test_missing_template_rejected(self, tmp_path):
        path = tmp_path / "mail.yaml"
        path.write_text('template_subject: "News"\n', encoding="utf-8")
        with pytest.raises(ValueError, match="template_body"):
            load_notification_config(path)

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "mail.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="expected a YAML mapping"):
            load_notification_config(path)

    def test_non_string_template_rejected(self, tmp_path):
        path = tmp_path / "mail.yaml"
        path.write_text("template_subject: 3\ntemplate_body: body\n", encoding="utf-8")
        with pytest.raises(ValueError, match="must be a string"):
            load_notification_config(path)

    def test_shipped_config_is_valid(self):
        config = load_notification_config("config/mail_notifications.yaml")
        assert "[os2loop_mail_notifications:messages_with_headings]" in config.template_body


def test_get_notification_config_cached(monkeypatch, tmp_path):
    from loop_notifications.core.settings import get_settings

    path = tmp_path / "mail.yaml"
    path.write_text("template_subject: S\ntemplate_body: B\n", encoding="utf-8")
    monkeypatch.setenv("NOTIFICATIONS_CONFIG_PATH", str(path))
    get_settings.cache_clear()
    get_notification_config.cache_clear()
    try:
        first = get_notification_config()
        path.write_text("template_subject: changed\ntemplate_body: B\n", encoding="utf-8")
        assert get_notification_config() is first
        assert first.template_subject == "S"
    finally:
        get_settings.cache_clear()
        get_notification_config.cache_clear()
