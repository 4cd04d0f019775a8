"""Command line interface for ledgerhealth."""
