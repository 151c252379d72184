"""Shared infrastructure for the backend services."""
