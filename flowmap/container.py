"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It allows registering and resolving the adapters behind each port.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations
3. Lazy loading - adapters instantiated on first use
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config
from .domain.errors import ConfigurationError
from .ports.rendering import CanvasPort


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        service = container.resolve(FlowMapService)

        # Testing
        container = Container()
        container.register(GraphRepositoryPort, lambda: FakeRepository())
        repository = container.resolve(GraphRepositoryPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        self._factories[port_type] = factory
        self._singletons.pop(port_type, None)
        if singleton:
            self._singleton_types.add(port_type)
        else:
            self._singleton_types.discard(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Raises:
            KeyError: If the type is not registered.
        """
        if port_type not in self._factories:
            raise KeyError(f"Type not registered: {port_type}")

        if port_type in self._singleton_types:
            if port_type not in self._singletons:
                self._singletons[port_type] = self._factories[port_type]()
            return self._singletons[port_type]

        return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons.

        Call this in tests to ensure fresh instances.
        """
        self._singletons.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        The graph repository follows ``config.graph.format``; the usage
        store is bound only when a database URI is configured.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.graph import CSVGraphRepository, OSRMGraphRepository, TreeSolver
        from .adapters.progress import NullProgress, TqdmProgress
        from .adapters.store import SQLUsageStore
        from .ports.graph import GraphRepositoryPort, ShortestPathSolverPort
        from .ports.progress import ProgressPort
        from .ports.store import UsageStorePort
        from .services import FlowMapService
        from .viz.flow import FlowRenderer

        config = config or get_config()
        container = cls(config=config)

        # Progress is a fresh reporter per consumer
        def create_progress() -> ProgressPort:
            if config.observability.progress:
                return TqdmProgress()
            return NullProgress()

        container.register(ProgressPort, create_progress, singleton=False)

        # Graph
        def create_repository() -> GraphRepositoryPort:
            progress = container.resolve(ProgressPort)
            if config.graph.format == "csv":
                return CSVGraphRepository(config.graph, progress)
            return OSRMGraphRepository(config.graph, progress)

        container.register(GraphRepositoryPort, create_repository)
        container.register(ShortestPathSolverPort, lambda: TreeSolver())

        # Rendering
        container.register(FlowRenderer, lambda: FlowRenderer(config.render))

        # Persistence
        if config.store.uri:
            container.register(
                UsageStorePort,
                lambda: SQLUsageStore(config.store, container.resolve(ProgressPort)),
            )

        # Main service
        def create_service() -> FlowMapService:
            return FlowMapService(
                graph_repository=container.resolve(GraphRepositoryPort),
                solver=container.resolve(ShortestPathSolverPort),
                renderer=container.resolve(FlowRenderer),
                usage_store=(
                    container.resolve(UsageStorePort)
                    if container.is_registered(UsageStorePort)
                    else None
                ),
                progress=container.resolve(ProgressPort),
            )

        container.register(FlowMapService, create_service)

        return container


def create_canvas(output_path: Path, format: Optional[str] = None) -> CanvasPort:
    """Build the canvas matching ``format`` or the output file suffix.

    Raises:
        ConfigurationError: If the format is not pdf, svg or html.
    """
    from .adapters.rendering import FoliumCanvas, MatplotlibCanvas

    fmt = (format or output_path.suffix.lstrip(".") or "pdf").lower()
    if fmt == "html":
        return FoliumCanvas(output_path)
    if fmt in {"pdf", "svg"}:
        if output_path.suffix.lower() != f".{fmt}":
            output_path = output_path.with_suffix(f".{fmt}")
        return MatplotlibCanvas(output_path)
    raise ConfigurationError(
        f"Unsupported output format: {fmt!r}",
        setting_name="format",
        expected_type="pdf, svg or html",
    )
