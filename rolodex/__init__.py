"""Rolodex contact deduplication service."""
