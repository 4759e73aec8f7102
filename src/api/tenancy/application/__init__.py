"""Application layer for the tenancy context."""
