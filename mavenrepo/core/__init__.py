"""Application wiring: data directory, configuration and request dependencies."""
