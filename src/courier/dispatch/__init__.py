"""Dispatch engine — pipeline composition, send, and publish.

Dispatch may import from domain and registry.
It must never import from plugins, behaviors, config, or commands.
"""

from courier.dispatch.mediator import Mediator
from courier.dispatch.pipeline import build_pipeline

__all__ = ["Mediator", "build_pipeline"]
