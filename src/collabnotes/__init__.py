"""
CollabNotes Backend - Collaborative Note Taking Platform

Password-based sessions with rotating refresh tokens, per-note roles,
sharing with an audit trail, and a pull-based notification feed.
"""

__version__ = "1.0.0"
