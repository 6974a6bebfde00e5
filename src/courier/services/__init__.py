"""Service layer — assembling mediators from settings, inspection, telemetry.

Services may import from domain, registry, dispatch, behaviors, plugins and config.
They must never import from commands or output.
"""
