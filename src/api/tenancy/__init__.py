"""Tenancy bounded context.

Resolves exactly one authoritative tenant per request, binds it to the
authenticated identity, detects cross-tenant tampering and records the
audit trail.
"""
