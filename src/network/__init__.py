"""Shared network constants."""
