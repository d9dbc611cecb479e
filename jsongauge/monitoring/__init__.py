"""Logging setup and structured events."""
