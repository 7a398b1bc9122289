"""Provides access to the data stores and external services."""
