"""Resolver package for the GraphQL schema.

Each module holds the resolvers of one lifecycle (accounts, portfolios,
ratings, feedbacks, the social graph) plus the user queries; the root
Query and Mutation types import them lazily.
"""
