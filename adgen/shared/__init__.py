"""Shared infrastructure used by every AdGen module."""
