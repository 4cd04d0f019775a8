"""Domain layer for ledgerhealth.

Services are loaded lazily so that the database layer can import the
entities without pulling in the services that depend on it.
"""

_SERVICES = {
    "ReferenceRegistry": "ledgerhealth.domain.registry",
    "IngestionService": "ledgerhealth.domain.ingestion",
    "MetricsService": "ledgerhealth.domain.metrics",
    "ScoringService": "ledgerhealth.domain.scoring",
    "ViewService": "ledgerhealth.domain.views",
    "UnitService": "ledgerhealth.domain.units",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
