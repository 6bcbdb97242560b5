"""Shared models and utilities for Haven services."""
