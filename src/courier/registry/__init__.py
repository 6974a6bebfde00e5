"""Registry layer — bindings from message types to handlers and behaviors.

Registry may import from domain only.
"""

from courier.registry.registry import (
    Binding,
    HandlerRegistry,
    Lifetime,
    Registration,
    RegistryBuilder,
)

__all__ = ["Binding", "HandlerRegistry", "Lifetime", "Registration", "RegistryBuilder"]
