"""Request-level services built on top of the repository engine."""
