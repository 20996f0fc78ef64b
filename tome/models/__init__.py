"""Data models for tome."""
