"""Daybook: calendar, todo list and habit tracker API."""

__version__ = "1.0.0"
