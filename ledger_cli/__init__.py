"""Console front end for the ledger."""
