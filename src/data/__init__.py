"""Data access layer: backend API clients."""
