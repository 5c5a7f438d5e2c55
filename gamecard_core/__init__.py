"""GameCard Core: account authentication and session lifecycle service."""
