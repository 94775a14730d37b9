"""Core library for cbt-modules."""
