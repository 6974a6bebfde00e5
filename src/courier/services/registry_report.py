"""RegistryService — describe the bindings a configuration produces."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import TYPE_CHECKING

from courier.domain.errors import RegistrationError
from courier.services.bootstrap import build_registry
from courier.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from courier.config.settings import CourierSettings
    from courier.plugins.manager import PluginManager


class RegistryService:
    """Read-only inspection of the registry built from settings."""

    def __init__(
        self,
        settings: CourierSettings,
        *,
        plugin_manager: PluginManager | None = None,
    ) -> None:
        self._settings = settings
        self._plugin_manager = plugin_manager

    def list_handlers(self, modules: Iterable[str] = ()) -> ServiceResult:
        """Build the registry and list every binding it holds."""
        op = "list_handlers"
        try:
            registry = build_registry(
                self._settings,
                modules=modules,
                plugin_manager=self._plugin_manager,
            )
        except RegistrationError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="REGISTRATION_ERROR",
                    message=str(exc),
                    detail={"cause": type(exc.__cause__).__name__} if exc.__cause__ else {},
                ),
            )

        bindings = registry.describe()
        counts = Counter(b.kind for b in bindings)
        warnings: list[str] = []
        if not counts["request"] and not counts["notification"]:
            warnings.append("No handlers registered")

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "count": len(bindings),
                "requests": counts["request"],
                "notifications": counts["notification"],
                "behaviors": counts["behavior"],
                "bindings": [b.model_dump(mode="json") for b in bindings],
            },
            warnings=warnings,
        )
