"""GraphQL API for Inkwell."""
