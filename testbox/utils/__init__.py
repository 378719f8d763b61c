"""Utility helpers for testbox."""
