"""Lexical SQL scanning: tables, aliases and WHERE predicates."""
