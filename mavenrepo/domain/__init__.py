"""Value types, descriptor parsing and the error taxonomy."""
