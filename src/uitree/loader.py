"""Component loader - resolves implementations once per class id.

Loads are started eagerly and memoized as tasks keyed by
``(class_id, variant)``. A request for a load that is still in flight joins
the running task, so no class id is fetched twice in a session, and a failed
load stays failed.
"""

import asyncio
import importlib
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Protocol

from .core import get_logger, LoadError
from .models import ComponentMeta
from .monitoring import metrics_collector

logger = get_logger(__name__)

COMPONENT = "component"
EXAMPLE = "example"
DATASET_TYPE = "dataset"


@dataclass(frozen=True)
class LoadedModule:
    """An implementation returned by a module source."""

    implementation: Any
    name: str


class ModuleSource(Protocol):
    """Where component implementations come from."""

    async def fetch_module(
        self, root_url: str, type_name: str, class_id: str, variant: str
    ) -> LoadedModule:
        """Fetch one implementation; raise LoadError if unavailable."""
        ...


class ImportModuleSource:
    """
    Resolves implementations from Python modules.

    ``<package>.<type_name>`` is imported in a worker thread; the ``default``
    attribute is the component and ``example`` its example variant.
    """

    def __init__(self, package: str) -> None:
        self.package = package

    async def fetch_module(
        self, root_url: str, type_name: str, class_id: str, variant: str
    ) -> LoadedModule:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._import, type_name, class_id, variant)

    def _import(self, type_name: str, class_id: str, variant: str) -> LoadedModule:
        module_name = f"{self.package}.{type_name}"
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise LoadError(f"Cannot import {module_name}", class_id, variant) from e

        attr = "default" if variant == COMPONENT else variant
        try:
            implementation = getattr(module, attr)
        except AttributeError as e:
            raise LoadError(f"{module_name} has no '{attr}'", class_id, variant) from e

        return LoadedModule(implementation, getattr(module, "name", type_name))


class RegistryModuleSource:
    """In-process implementations registered by type name."""

    def __init__(self) -> None:
        self._modules: dict[tuple[str, str], Any] = {}

    def register(self, type_name: str, implementation: Any = None, variant: str = COMPONENT):
        """
        Register an implementation, directly or as a decorator.

        Example:
            @source.register("textbox")
            class Textbox: ...
        """
        if implementation is not None:
            self._modules[(type_name, variant)] = implementation
            return implementation

        def decorator(obj: Any) -> Any:
            self._modules[(type_name, variant)] = obj
            return obj

        return decorator

    async def fetch_module(
        self, root_url: str, type_name: str, class_id: str, variant: str
    ) -> LoadedModule:
        try:
            return LoadedModule(self._modules[(type_name, variant)], type_name)
        except KeyError as e:
            raise LoadError(f"No {variant} registered for '{type_name}'", class_id, variant) from e


@dataclass
class LoaderStats:
    """Loader cache statistics."""

    loads: int = 0
    hits: int = 0
    misses: int = 0
    failures: int = 0


@dataclass
class ResolvedComponent:
    """A component's pending implementation and example implementations."""

    component: Awaitable[Any]
    name: str
    example_components: dict[str, Awaitable[Any]] | None = None


class ComponentLoader:
    """
    Resolves and caches component implementations.

    Must be used from a running event loop; every load is an asyncio task.
    """

    def __init__(self, source: ModuleSource) -> None:
        self.source = source
        self._tasks: dict[tuple[str, str], asyncio.Task] = {}
        self._names: dict[tuple[str, str], str] = {}
        self._stats = LoaderStats()

    def load(self, type_name: str, class_id: str, root_url: str, variant: str = COMPONENT) -> asyncio.Task:
        """
        Start (or join) the load of one implementation.

        Args:
            type_name: Component type
            class_id: Implementation cache key
            root_url: Root URL handed to the module source
            variant: ``component`` or ``example``

        Returns:
            Task resolving to the implementation, or raising LoadError
        """
        key = (class_id, variant)
        task = self._tasks.get(key)
        if task is not None:
            self._stats.hits += 1
            metrics_collector.record_cache_hit()
            return task

        self._stats.misses += 1
        task = asyncio.ensure_future(self._fetch(type_name, class_id, root_url, variant))
        task.add_done_callback(self._on_done(class_id, variant))
        self._tasks[key] = task
        return task

    async def _fetch(self, type_name: str, class_id: str, root_url: str, variant: str) -> Any:
        logger.debug("loading", type=type_name, class_id=class_id, variant=variant)
        try:
            module = await self.source.fetch_module(root_url, type_name, class_id, variant)
        except LoadError:
            raise
        except Exception as e:
            raise LoadError(f"Failed to load {type_name}: {e}", class_id, variant) from e
        self._stats.loads += 1
        self._names[(class_id, variant)] = module.name
        return module.implementation

    def _on_done(self, class_id: str, variant: str) -> Callable[[asyncio.Task], None]:
        def callback(task: asyncio.Task) -> None:
            if task.cancelled():
                return
            error = task.exception()
            if error is None:
                metrics_collector.record_load(variant, "success")
                return
            self._stats.failures += 1
            metrics_collector.record_load(variant, "error")
            logger.warning("load_failed", class_id=class_id, variant=variant, error=str(error))

        return callback

    def get_component(
        self,
        type: str,
        class_id: str,
        root_url: str,
        components: Iterable[ComponentMeta],
        example_components: Iterable[str] | None = None,
    ) -> ResolvedComponent:
        """
        Resolve a component and, for datasets, its example components.

        Args:
            type: Component type
            class_id: Implementation cache key
            root_url: Root URL of the app
            components: All component metadata of the app
            example_components: Type names shown as dataset examples

        Returns:
            Pending implementation plus the example map (None if empty)

        The name is the one the module source reported once the component
        load has completed, and the requested type while it is in flight.
        """
        example_map: dict[str, Awaitable[Any]] = {}
        if type == DATASET_TYPE and example_components:
            components = list(components)
            for name in example_components:
                if name in example_map:
                    continue
                match = next((c for c in components if c.type == name), None)
                if match is not None:
                    example_map[name] = self.load(name, match.component_class_id, root_url, EXAMPLE)

        return ResolvedComponent(
            component=self.load(type, class_id, root_url, COMPONENT),
            name=self._names.get((class_id, COMPONENT), type),
            example_components=example_map or None,
        )

    def preload_all_components(
        self, components: Iterable[ComponentMeta], root_url: str
    ) -> dict[str, Awaitable[Any]]:
        """
        Start loading every component's implementation.

        Returns:
            Map of class id to pending implementation
        """
        components = list(components)
        constructor_map: dict[str, Awaitable[Any]] = {}
        for c in components:
            resolved = self.get_component(c.type, c.component_class_id, root_url, components)
            constructor_map[c.component_class_id] = resolved.component
        return constructor_map

    @property
    def stats(self) -> LoaderStats:
        """Get loader statistics."""
        return self._stats

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, key: tuple[str, str]) -> bool:
        return key in self._tasks


__all__ = [
    "LoadedModule",
    "ModuleSource",
    "ImportModuleSource",
    "RegistryModuleSource",
    "LoaderStats",
    "ResolvedComponent",
    "ComponentLoader",
    "COMPONENT",
    "EXAMPLE",
    "DATASET_TYPE",
]
