"""Hierarchical clustering and its validation."""
