"""Companions app package.

Holds the bookable companion profile: hourly rate, availability,
moderation status and the payout sub-account used for split payments.
Discovery and search live elsewhere; this app only exposes what the
booking engine and payout setup need.
"""
