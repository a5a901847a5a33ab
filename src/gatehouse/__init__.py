"""Gatehouse — user signup, login and OAuth identity linking over HTTP.

Issues JWT bearer tokens for password and OAuth-linked accounts and
exposes a minimal user directory backed by a relational store.
"""

__version__ = "0.1.0"
