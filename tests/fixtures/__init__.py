"""Shared pytest fixtures for the profile service tests."""
