"""Persistence for the task collection."""
