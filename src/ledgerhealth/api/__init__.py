"""HTTP interface for ledgerhealth."""

from ledgerhealth.api.app import create_app

__all__ = ["create_app"]
