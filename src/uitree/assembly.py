"""Tree Assembler - binds implementations and derived props along the layout."""

import asyncio
from typing import Any, Awaitable, Mapping

from .clients.backend import RemoteClient
from .core import get_logger, LoadError
from .interactivity import determine_interactivity
from .loader import ComponentLoader, DATASET_TYPE
from .models import ComponentMeta, LayoutNode, TargetMap
from .monitoring import metrics_collector
from .server_fns import process_server_fn
from .store import Writable

logger = get_logger(__name__)


class TreeAssembler:
    """
    Walks the layout tree depth-first and publishes the finished tree once.

    Every node gets its implementation, example component map (datasets),
    attached events, interactivity and server functions. Children of a node
    are walked concurrently; a node completes once all its children have.
    """

    def __init__(
        self,
        instance_map: Mapping[int, ComponentMeta],
        constructor_map: Mapping[str, Awaitable[Any]],
        loader: ComponentLoader,
        root_url: str,
        target_map: TargetMap,
        inputs: set[int],
        outputs: set[int],
        client: RemoteClient,
        layout: Writable[ComponentMeta] | None = None,
    ) -> None:
        self.instance_map = instance_map
        self.constructor_map = constructor_map
        self.loader = loader
        self.root_url = root_url
        self.target_map = target_map
        self.inputs = inputs
        self.outputs = outputs
        self.client = client
        self.layout = layout if layout is not None else Writable()
        self.component_map: dict[int, ComponentMeta] = {}

    async def assemble(self, node: LayoutNode) -> ComponentMeta:
        """
        Walk the whole layout, then publish the root to the layout store.

        Args:
            node: Layout root

        Returns:
            The fully populated root component
        """
        with metrics_collector.measure_duration(metrics_collector.record_assembly):
            root = await self.walk_layout(node)
        logger.info("assembled", components=len(self.component_map))
        self.layout.set(root)
        return root

    async def walk_layout(self, node: LayoutNode) -> ComponentMeta:
        instance = self.instance_map[node.id]

        instance.component = await self._resolve(instance)

        if instance.type == DATASET_TYPE:
            instance.props["component_map"] = await self._resolve_examples(instance)

        if instance.id in self.target_map:
            instance.props["attached_events"] = list(self.target_map[instance.id])

        instance.props["interactive"] = determine_interactivity(
            instance.id,
            instance.props.get("interactive"),
            instance.props.get("value"),
            self.inputs,
            self.outputs,
        )

        instance.props["server"] = process_server_fn(
            instance.id, instance.props.get("server_fns"), self.client
        )

        self.component_map[instance.id] = instance

        if node.children:
            instance.children = list(
                await asyncio.gather(*(self.walk_layout(child) for child in node.children))
            )

        return instance

    async def _resolve(self, instance: ComponentMeta) -> Any:
        pending = self.constructor_map.get(instance.component_class_id)
        if pending is None:
            logger.warning("unresolved", id=instance.id, class_id=instance.component_class_id)
            return None
        try:
            return await pending
        except LoadError:
            # Already logged by the loader; render layer shows a placeholder
            return None

    async def _resolve_examples(self, instance: ComponentMeta) -> dict[str, Any] | None:
        resolved = self.loader.get_component(
            instance.type,
            instance.component_class_id,
            self.root_url,
            self.instance_map.values(),
            instance.props.get("components"),
        )
        if not resolved.example_components:
            return None

        names = list(resolved.example_components)
        results = await asyncio.gather(*resolved.example_components.values(), return_exceptions=True)

        component_map: dict[str, Any] = {}
        for name, result in zip(names, results):
            if isinstance(result, LoadError):
                continue
            if isinstance(result, BaseException):
                raise result
            component_map[name] = result
        return component_map or None


__all__ = ["TreeAssembler"]
