"""Domain layer: the container hierarchy, its identifiers and errors."""
