"""Shared utilities for digital rain."""
