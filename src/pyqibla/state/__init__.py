"""State/store layer.

This package is the single source of truth for how permission changes,
sensor readings and bearing lookups are merged into one deterministic
snapshot.
"""
