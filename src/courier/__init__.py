"""courier — in-process request/notification mediator with pipeline behaviors."""

from courier.dispatch.mediator import Mediator
from courier.domain.cancellation import CancellationToken
from courier.domain.errors import (
    CourierError,
    HandlerNotFoundError,
    NotificationPublishError,
    OperationCancelledError,
    RegistrationError,
)
from courier.domain.handlers import (
    NotificationHandler,
    PipelineBehavior,
    RequestHandler,
    RequestHandlerDelegate,
)
from courier.domain.messages import Notification, Request, RequestKey
from courier.registry import HandlerRegistry, RegistryBuilder

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "CourierError",
    "HandlerNotFoundError",
    "HandlerRegistry",
    "Mediator",
    "Notification",
    "NotificationHandler",
    "NotificationPublishError",
    "OperationCancelledError",
    "PipelineBehavior",
    "RegistrationError",
    "RegistryBuilder",
    "Request",
    "RequestHandler",
    "RequestHandlerDelegate",
    "RequestKey",
    "__version__",
]
