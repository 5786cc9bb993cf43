"""Service layer for scheduling and booking operations."""
