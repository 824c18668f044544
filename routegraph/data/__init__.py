"""Packaged sample networks."""
