"""Recommendation service for the DarkCase true-crime catalog."""
