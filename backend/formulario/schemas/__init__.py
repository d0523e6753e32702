"""
Formulario Backend — Pydantic Schemas
======================================

API contracts, kept separate from the ORM models so the wire format can
change without touching the tables.
"""
