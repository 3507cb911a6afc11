"""Shared fixtures for the Media Catalog tests."""
