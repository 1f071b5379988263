"""Order repositories package."""
