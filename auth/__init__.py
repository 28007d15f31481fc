"""
auth — bearer authentication for the connector routes.

Provides:
  • signed bearer token creation & verification

Users are identified by an external system; this package only checks
that a request carries a token minted with ``JWT_SECRET``.
"""
