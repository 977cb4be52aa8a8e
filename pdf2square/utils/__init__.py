"""Shared helpers: logging, bounded concurrency and image utilities."""
