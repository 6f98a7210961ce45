"""Package version parsing, resolution and build-scoped memoization."""
