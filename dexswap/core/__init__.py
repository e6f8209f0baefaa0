"""Swap domain logic: decisions, ordering and status normalization."""
