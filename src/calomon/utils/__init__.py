"""Shared utilities: logging, configuration loading, factories and errors."""
