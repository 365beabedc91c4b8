"""Pieces used by more than one Fliq app: domain errors, events, money and the transaction boundary."""
