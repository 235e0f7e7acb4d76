"""Credential store: ORM model, store handle and user queries."""
