"""Schema metadata providers."""
