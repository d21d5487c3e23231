"""Parsing and formatting helpers."""
