"""Bookings app package.

This app encapsulates the booking lifecycle: the booking model, the
state machine of named transitions, the command handlers that enforce
request expiry, completion confirmation and dispute resolution, and
the periodic sweeps that expire and auto-complete bookings. Status
changes are conditional writes so concurrent actors cannot both win.
"""
