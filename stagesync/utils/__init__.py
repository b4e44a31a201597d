"""Small shared helpers (logging setup)."""
