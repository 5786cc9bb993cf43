"""Availability and booking engine for marketplace service providers."""
