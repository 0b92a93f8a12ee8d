"""Application layer: ports, services, controllers and view-models.

Depends on ``domain`` and on infrastructure settings/logging helpers; adapters
are injected through the ports.
"""
