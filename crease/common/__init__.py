"""Shared helpers used across Crease packages."""
