"""
Pydantic schema definitions for API payloads.

Each domain (mumineen, events, pass preferences, etc.) defines its own
Pydantic models for request and response bodies.  Schemas are
separated from the SQL layer to decouple API representation from
persistence.
"""
