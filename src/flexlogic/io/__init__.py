"""Persistence and export of sessions, templates and schedule."""
