"""HTTP API package for the ledger."""
