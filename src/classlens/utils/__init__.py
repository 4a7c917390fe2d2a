"""Shared helpers: logging setup and file IO."""
