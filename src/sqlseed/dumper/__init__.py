"""Rendering and writing generated SQL."""
