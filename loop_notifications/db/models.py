from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, JSON, String, func, text as sql_text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from loop_notifications.db.base import Base


class User(Base):
    __tablename__ = "users"

    uid: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    mail: Mapped[str | None] = mapped_column(String(254), nullable=True)
    preferred_langcode: Mapped[str] = mapped_column(
        String(12), nullable=False, default="en", server_default=sql_text("'en'")
    )

    messages: Mapped[list[Message]] = relationship(back_populates="owner")

    def display_name(self) -> str:
        return self.name


class TaxonomyTerm(Base):
    __tablename__ = "taxonomy_terms"

    tid: Mapped[int] = mapped_column(Integer, primary_key=True)
    vid: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class Node(Base):
    """A content item.

    ``shared_subject_tid`` is the taxonomy term shared between content
    types; subscribing to that term subscribes to every node carrying it.
    """

    __tablename__ = "nodes"

    nid: Mapped[int] = mapped_column(Integer, primary_key=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    shared_subject_tid: Mapped[int | None] = mapped_column(
        ForeignKey("taxonomy_terms.tid", ondelete="SET NULL"), nullable=True
    )

    shared_subject: Mapped[TaxonomyTerm | None] = relationship()


class Message(Base):
    """An activity message created by the content platform.

    ``text`` maps a language code to the list of rendered text partials of
    the message in that language.  Only the first partial is used in mails.
    """

    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_template_created", "template", "created"),)

    mid: Mapped[int] = mapped_column(Integer, primary_key=True)
    template: Mapped[str] = mapped_column(String(64), nullable=False)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    uid: Mapped[int | None] = mapped_column(ForeignKey("users.uid", ondelete="SET NULL"), nullable=True)
    node_nid: Mapped[int | None] = mapped_column(ForeignKey("nodes.nid", ondelete="SET NULL"), nullable=True)
    text: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    owner: Mapped[User | None] = relationship(back_populates="messages")
    node: Mapped[Node | None] = relationship()

    def get_text(self, langcode: str, default_langcode: str = "en") -> list[str]:
        """Return the rendered partials in *langcode*.

        Falls back to *default_langcode* and then to an empty list.
        """
        texts = self.text or {}
        if langcode in texts:
            return list(texts[langcode] or [])
        return list(texts.get(default_langcode) or [])


class Flagging(Base):
    """A user flagging an entity, e.g. subscribing to a node or a term."""

    __tablename__ = "flagging"
    __table_args__ = (Index("ix_flagging_flag_id_uid", "flag_id", "uid"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    flag_id: Mapped[str] = mapped_column(String(32), nullable=False)
    uid: Mapped[int] = mapped_column(ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(32), nullable=False)
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
