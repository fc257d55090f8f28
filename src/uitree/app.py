"""App facade - wires routing, loading, assembly and updates for one session."""

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .assembly import TreeAssembler
from .clients.backend import RemoteClient
from .core import get_logger, get_settings, LogContext, safe_json_dumps
from .frontend import process_frontend_fn
from .loader import ComponentLoader, ImportModuleSource
from .loading_status import LoadingStatus
from .models import AppConfig, ComponentMeta, Dependency, LayoutNode, TargetMap, UpdateTransaction
from .routing import create_target_meta, get_inputs_outputs
from .scheduler import FrameScheduler, LoopFrameScheduler, UpdateScheduler
from .store import Writable

logger = get_logger(__name__)

ROOT_TYPE = "column"


@dataclass
class AppHandle:
    """Live state of one assembled app."""

    layout: Writable[ComponentMeta]
    targets: TargetMap
    loading_status: LoadingStatus
    scheduled_updates: Writable[bool]
    dependencies: list[Dependency]
    ready: asyncio.Task
    scheduler: UpdateScheduler = field(repr=False)
    assembler: TreeAssembler = field(repr=False)

    def submit_update(self, updates: Iterable[UpdateTransaction | Mapping[str, Any]]) -> None:
        """Queue a batch of prop updates for the next flush."""
        self.scheduler.submit(updates)

    def read_value(self, id: int) -> Any:
        """
        Current value of a component.

        Returns the instance's ``get_value()`` result (possibly awaitable) when
        the rendered instance exposes one, otherwise the ``value`` prop.

        Raises:
            KeyError: If the component has not been assembled
        """
        component = self.assembler.component_map[id]
        get_value = getattr(component.instance, "get_value", None)
        if callable(get_value):
            return get_value()
        return component.props.get("value")

    async def read_value_async(self, id: int) -> Any:
        """Like ``read_value`` but always awaited."""
        value = self.read_value(id)
        if inspect.isawaitable(value):
            return await value
        return value

    def dump_tree(self, indent: int = 0) -> str:
        """
        JSON snapshot of the published tree for debugging.

        Implementations and live instances are left out; callables and
        pending loads inside props appear as their repr. Returns ``"null"``
        before the tree is published.
        """
        root = self.layout.get()
        return safe_json_dumps(root.model_dump() if root is not None else None, indent=indent)


def create_root_node(layout: LayoutNode, fill_height: bool) -> ComponentMeta:
    """Synthetic top-level container wrapping the declared layout."""
    return ComponentMeta(
        id=layout.id,
        type=ROOT_TYPE,
        props={"interactive": False, "scale": 1 if fill_height else None},
        has_modes=False,
        component_class_id="",
    )


def create_components(
    components: Iterable[ComponentMeta | Mapping[str, Any]],
    layout: LayoutNode | Mapping[str, Any],
    dependencies: Iterable[Dependency | Mapping[str, Any]],
    root: str,
    client: RemoteClient,
    *,
    fill_height: bool = False,
    loader: ComponentLoader | None = None,
    frame_scheduler: FrameScheduler | None = None,
) -> AppHandle:
    """
    Build the routing table, start all loads and schedule tree assembly.

    Must be called from a running event loop. Returns immediately; the
    layout store receives the root once ``handle.ready`` completes.

    Args:
        components: Component metadata from the server
        layout: Layout tree
        dependencies: Events, triggers, inputs and outputs
        root: Root URL of the app
        client: Remote procedure client for server functions
        fill_height: Whether the root container should fill the page height
        loader: Component loader (defaults to an ImportModuleSource loader)
        frame_scheduler: Frame scheduler for update flushes

    Returns:
        Handle to the app session
    """
    settings = get_settings()
    layout = layout if isinstance(layout, LayoutNode) else LayoutNode.model_validate(layout)
    metas = [c if isinstance(c, ComponentMeta) else ComponentMeta.model_validate(c) for c in components]
    deps = [d if isinstance(d, Dependency) else Dependency.model_validate(d) for d in dependencies]

    root_node = create_root_node(layout, fill_height)
    all_components = [*metas, root_node]

    target_map: TargetMap = {}
    inputs: set[int] = set()
    outputs: set[int] = set()
    loading_status = LoadingStatus()

    for fn_index, dep in enumerate(deps):
        loading_status.register(fn_index, dep.inputs, dep.outputs)
        dep.frontend_fn = process_frontend_fn(
            dep.js, dep.backend_fn, len(dep.inputs), len(dep.outputs)
        )
        create_target_meta(dep.targets, fn_index, target_map)
        get_inputs_outputs(dep, inputs, outputs)

    if loader is None:
        loader = ComponentLoader(ImportModuleSource(settings.component_package))
    constructor_map = loader.preload_all_components(all_components, root)

    instance_map = {c.id: c for c in all_components}

    layout_store: Writable[ComponentMeta] = Writable()
    assembler = TreeAssembler(
        instance_map=instance_map,
        constructor_map=constructor_map,
        loader=loader,
        root_url=root,
        target_map=target_map,
        inputs=inputs,
        outputs=outputs,
        client=client,
        layout=layout_store,
    )

    async def assemble() -> ComponentMeta:
        with LogContext(root_url=root):
            return await assembler.assemble(layout)

    ready = asyncio.ensure_future(assemble())
    ready.add_done_callback(_log_assembly_failure)

    scheduled_updates = Writable(False)
    scheduler = UpdateScheduler(
        layout=layout_store,
        instance_map=instance_map,
        frame_scheduler=frame_scheduler or LoopFrameScheduler(settings.frame_interval),
        scheduled_updates=scheduled_updates,
    )

    logger.info(
        "session_created",
        components=len(all_components),
        dependencies=len(deps),
        targets=len(target_map),
    )

    return AppHandle(
        layout=layout_store,
        targets=target_map,
        loading_status=loading_status,
        scheduled_updates=scheduled_updates,
        dependencies=deps,
        ready=ready,
        scheduler=scheduler,
        assembler=assembler,
    )


def _log_assembly_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error("assembly_failed", error=str(error), error_type=type(error).__name__)


async def assemble_app(
    config: AppConfig,
    client: RemoteClient,
    *,
    loader: ComponentLoader | None = None,
    frame_scheduler: FrameScheduler | None = None,
) -> AppHandle:
    """Create the session from a parsed payload and wait until the tree is published."""
    handle = create_components(
        config.components,
        config.layout,
        config.dependencies,
        config.root,
        client,
        fill_height=config.fill_height,
        loader=loader,
        frame_scheduler=frame_scheduler,
    )
    await handle.ready
    return handle


__all__ = ["AppHandle", "create_components", "create_root_node", "assemble_app"]
