"""Application layer: configuration, wiring and transport."""
