"""Core utilities and shared constants."""
