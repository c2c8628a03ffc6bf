"""Test helper utilities."""
