"""Type classification and best-effort value parsing."""
