"""Concrete implementations of the provider interfaces."""
