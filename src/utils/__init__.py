"""Shared helpers: logging, JSON files, paths."""
