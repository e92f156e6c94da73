"""Bulk generator widgets."""
