"""Domain layer for the fluency coach."""
