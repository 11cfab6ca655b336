"""Helpers for building test data."""
