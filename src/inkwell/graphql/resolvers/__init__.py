"""Resolver package for the GraphQL schema.

Types, queries and mutations import these functions lazily to avoid
circular imports between the type modules.
"""
