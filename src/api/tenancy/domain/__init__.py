"""Domain layer for the tenancy context."""
