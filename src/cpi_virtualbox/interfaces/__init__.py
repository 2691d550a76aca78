"""Interfaces the provider depends on."""
