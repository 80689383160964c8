"""User Access API service."""
