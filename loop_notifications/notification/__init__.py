"""Mail notification package.

Collects recent activity messages, matches them against the node and
taxonomy term subscriptions of every subscribed user, and mails each user
one digest grouped by message type.
"""
