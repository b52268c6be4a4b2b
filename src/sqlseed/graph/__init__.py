"""Schema graph models and dependency resolution."""
