#!/usr/bin/env python3
"""Seed demo data: users, a taxonomy term, nodes, subscriptions and messages.

Usage:
    python scripts/seed_demo.py          # uses DATABASE_URL from env / .env
    DATABASE_URL=... python scripts/seed_demo.py
"""
from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

# Ensure project root is on sys.path
sys.path.insert(0, ".")

from loop_notifications.core.constants import FLAG_SUBSCRIPTION_NODE, FLAG_SUBSCRIPTION_TERM
from loop_notifications.core.settings import get_settings
from loop_notifications.db.base import Base
from loop_notifications.db.models import Flagging, Message, Node, TaxonomyTerm, User


def _link_text(heading: str, nid: int, title: str) -> dict:
    return {"en": [f'{heading}: <a href="/node/{nid}">{title}</a>']}


def seed(session: Session) -> None:
    """Insert demo users, content, subscriptions and activity messages."""
    now = datetime.now(timezone.utc)

    demo_users = [
        # (uid, name, mail, langcode)
        (1, "editor", "editor@example.com", "en"),
        (2, "anna", "anna@example.com", "en"),
        (3, "bo", "bo@example.dk", "da"),
        (4, "carl", "carl@example.com", "en"),
    ]
    for uid, name, mail, langcode in demo_users:
        session.add(User(uid=uid, name=name, mail=mail, preferred_langcode=langcode))

    session.add(TaxonomyTerm(tid=1, vid="os2loop_subject", name="Social care"))
    session.add(TaxonomyTerm(tid=2, vid="os2loop_subject", name="Elder care"))
    session.flush()

    demo_nodes = [
        # (nid, type, title, subject tid)
        (10, "os2loop_documents_document", "Hygiene guidelines", 1),
        (11, "os2loop_question", "How do we register medication?", 2),
        (12, "os2loop_documents_collection", "Onboarding", None),
    ]
    for nid, node_type, title, tid in demo_nodes:
        session.add(Node(nid=nid, type=node_type, title=title, shared_subject_tid=tid))
    session.flush()

    session.add(Flagging(flag_id=FLAG_SUBSCRIPTION_NODE, uid=2, entity_type="node", entity_id=10))
    session.add(Flagging(flag_id=FLAG_SUBSCRIPTION_NODE, uid=2, entity_type="node", entity_id=12))
    session.add(Flagging(flag_id=FLAG_SUBSCRIPTION_TERM, uid=3, entity_type="taxonomy_term", entity_id=2))

    demo_messages = [
        # (minutes ago, template, owner, nid, heading)
        (50, "os2loop_message_document_added", 1, 10, "New document"),
        (40, "os2loop_message_question_added", 4, 11, "New question"),
        (30, "os2loop_message_answer_added", 1, 11, "New answer"),
        (20, "os2loop_message_collection_edit", 2, 12, "Collection edited"),
        (10, "os2loop_message_document_edited", 4, 10, "Document edited"),
    ]
    titles = {nid: title for nid, _, title, _ in demo_nodes}
    for minutes, template, uid, nid, heading in demo_messages:
        session.add(Message(
            template=template,
            created=now - timedelta(minutes=minutes),
            uid=uid,
            node_nid=nid,
            text=_link_text(heading, nid, titles[nid]),
        ))

    session.commit()
    print(
        f"Seeded {len(demo_users)} users, {len(demo_nodes)} nodes, "
        f"3 subscriptions, {len(demo_messages)} messages."
    )


def main() -> None:
    settings = get_settings()
    engine = create_engine(settings.database_url)
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        seed(session)


if __name__ == "__main__":
    main()
