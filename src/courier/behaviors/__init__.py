"""Built-in pipeline behaviors.

All built-ins are open behaviors: they wrap every request they are
registered ahead of. Behaviors may import from domain and services.
"""

from courier.behaviors.logging import LoggingBehavior
from courier.behaviors.tracing import TracingBehavior
from courier.behaviors.validation import ResponseValidationBehavior

__all__ = ["LoggingBehavior", "ResponseValidationBehavior", "TracingBehavior"]
