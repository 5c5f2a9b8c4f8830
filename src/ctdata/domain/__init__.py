"""Domain layer — source tags, error taxonomy, and exchange schemas.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, exchange, commands, or config.
"""
