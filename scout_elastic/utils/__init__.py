"""Utility helpers for scout-elastic."""
