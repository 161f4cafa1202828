"""Squeak: embeddable multi-tenant Q&A API."""
