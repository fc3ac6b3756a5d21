"""Schemas - Pydantic models for payloads crossing the dispatch boundary."""
