"""GraphQL API for Rate My Portfolio."""
