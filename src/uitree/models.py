"""App payload data models."""

from typing import Any, Awaitable, Callable
from pydantic import BaseModel, ConfigDict, Field


FrontendFn = Callable[[list[Any]], Awaitable[Any]]


class ComponentMeta(BaseModel):
    """One component instance in the app."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="allow")

    id: int = Field(..., description="Server-assigned unique id")
    type: str = Field(..., description="Component kind")
    props: dict[str, Any] = Field(default_factory=dict)
    component_class_id: str = Field(default="", description="Implementation cache key")
    has_modes: bool = Field(default=False)
    children: list["ComponentMeta"] | None = Field(default=None)
    # Bound during assembly / by the rendering substrate
    component: Any = Field(default=None, exclude=True)
    instance: Any = Field(default=None, exclude=True)
    api_info: dict[str, Any] | None = Field(default=None)
    documentation: dict[str, Any] | None = Field(default=None)


class LayoutNode(BaseModel):
    """Structural layout reference."""

    id: int
    children: list["LayoutNode"] | None = Field(default=None)


class Dependency(BaseModel):
    """A registered event/data-flow interaction."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="allow")

    id: int | None = Field(default=None)
    targets: list[tuple[int, str]] = Field(default_factory=list)
    inputs: list[int] = Field(default_factory=list)
    outputs: list[int] = Field(default_factory=list)
    js: str | None = Field(default=None, description="Frontend function source")
    backend_fn: bool = Field(default=False)
    trigger_mode: str | None = Field(default=None)
    queue: bool | None = Field(default=None)
    api_name: str | None = Field(default=None)
    show_progress: str | None = Field(default=None)
    cancels: list[int] = Field(default_factory=list)
    frontend_fn: FrontendFn | None = Field(default=None, exclude=True)


class UpdateTransaction(BaseModel):
    """Set one prop of one component."""

    id: int
    prop: str
    value: Any = None


class AppConfig(BaseModel):
    """Complete server payload for one app session."""

    components: list[ComponentMeta] = Field(default_factory=list)
    layout: LayoutNode
    dependencies: list[Dependency] = Field(default_factory=list)
    root: str = Field(default="")
    fill_height: bool = Field(default=False)


TargetMap = dict[int, dict[str, list[int]]]


ComponentMeta.model_rebuild()
LayoutNode.model_rebuild()


__all__ = [
    "ComponentMeta",
    "LayoutNode",
    "Dependency",
    "UpdateTransaction",
    "AppConfig",
    "TargetMap",
    "FrontendFn",
]
