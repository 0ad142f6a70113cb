"""Bracket token replacement for mail templates.

Templates reference values as ``[type:name]``, e.g. ``[user:display-name]``
or ``[os2loop_mail_notifications:messages]``.  Each token type is served
by one or more providers registered on a ``Token`` instance.  A provider
receives the requested ``{name: original}`` tokens and the render data and
returns ``{original: replacement}`` for the tokens it knows.

Replacements are HTML-escaped unless they are ``Markup``.  Tokens nobody
provides are left in the text unchanged.
"""
from __future__ import annotations

import html
import re
from collections.abc import Callable

TOKEN_PATTERN = re.compile(r"\[(?P<type>[^\s\[\]:]+):(?P<name>[^\[\]]+)\]")

TokenProvider = Callable[[str, dict[str, str], dict], dict[str, object]]


class Markup(str):
    """Text inserted into a template as is."""


def user_tokens(token_type: str, tokens: dict[str, str], data: dict) -> dict[str, object]:
    replacements: dict[str, object] = {}
    user = data.get("user")
    if token_type != "user" or user is None:
        return replacements

    values = {
        "uid": user.uid,
        "name": user.name,
        "display-name": user.display_name(),
        "mail": user.mail or "",
        "preferred-langcode": user.preferred_langcode,
    }
    for name, original in tokens.items():
        if name in values:
            replacements[original] = values[name]
    return replacements


class Token:
    def __init__(self) -> None:
        self._providers: dict[str, list[TokenProvider]] = {}

    @classmethod
    def default(cls) -> Token:
        token = cls()
        token.register("user", user_tokens)
        return token

    def register(self, token_type: str, provider: TokenProvider) -> None:
        self._providers.setdefault(token_type, []).append(provider)

    def scan(self, text: str) -> dict[str, dict[str, str]]:
        """Return ``{type: {name: original}}`` for every token in *text*."""
        found: dict[str, dict[str, str]] = {}
        for match in TOKEN_PATTERN.finditer(text):
            found.setdefault(match.group("type"), {})[match.group("name")] = match.group(0)
        return found

    def replace(self, text: str, data: dict) -> str:
        if not text:
            return text

        replacements: dict[str, str] = {}
        for token_type, tokens in self.scan(text).items():
            for provider in self._providers.get(token_type, []):
                for original, value in provider(token_type, tokens, data).items():
                    if isinstance(value, Markup):
                        replacements[original] = str(value)
                    else:
                        replacements[original] = html.escape(str(value))

        if not replacements:
            return text
        return TOKEN_PATTERN.sub(lambda m: replacements.get(m.group(0), m.group(0)), text)
