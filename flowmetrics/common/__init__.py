"""Shared utilities for flowmetrics modules."""
