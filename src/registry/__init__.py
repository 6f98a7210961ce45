"""Registry metadata clients."""
