"""Domain layer — message types, handler capabilities, cancellation, errors.

This layer depends only on the stdlib.
It must never import from dispatch, registry, plugins, behaviors, or config.
"""
