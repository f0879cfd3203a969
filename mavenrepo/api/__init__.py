"""HTTP routes and path resolution."""
