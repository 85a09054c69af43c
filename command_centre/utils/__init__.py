"""Shared helpers: logging, formatting, password rules and schema enums."""
