"""Qt adapters (import requires PyQt6)."""
