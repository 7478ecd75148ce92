"""Shared logging and HTTP helpers."""
