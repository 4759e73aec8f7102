"""HTTP presentation layer for the tenancy context.

Routers live in ``tenancy.presentation.routes``; boundary exceptions in
``tenancy.presentation.exceptions``.
"""
