"""Tests for the advocate API."""
