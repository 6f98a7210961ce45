"""Shared helpers: fetch layer, cache store, errors and logging."""
