"""Core types, expected shapes, and exceptions."""
