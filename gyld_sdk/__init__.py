"""Thin async clients for the push and email providers used by Gyld."""
