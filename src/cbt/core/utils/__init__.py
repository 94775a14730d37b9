"""Shared utilities for cbt-modules."""
