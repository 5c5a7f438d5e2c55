"""Schema module for GameCard Core.

schema.sql in this package is the source of truth for the credential store.
"""
