"""
uitree
Assembles live component trees from server app configs and keeps their
props in sync through batched updates.
"""

from .app import AppHandle, assemble_app, create_components, create_root_node
from .assembly import TreeAssembler
from .frontend import process_frontend_fn
from .interactivity import determine_interactivity, has_no_default_value
from .loader import (
    ComponentLoader,
    ImportModuleSource,
    LoadedModule,
    ModuleSource,
    RegistryModuleSource,
    ResolvedComponent,
)
from .loading_status import LoadingStatus, ComponentLoadingStatus
from .models import AppConfig, ComponentMeta, Dependency, LayoutNode, TargetMap, UpdateTransaction
from .payload import parse_app_config, load_app_config
from .routing import create_target_meta, get_inputs_outputs
from .scheduler import FrameScheduler, LoopFrameScheduler, UpdateScheduler
from .server_fns import process_server_fn
from .store import Writable


def create_container(root_url: str | None = None, session_hash: str | None = None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(root_url, session_hash)


__all__ = [
    # Session
    "AppHandle",
    "assemble_app",
    "create_components",
    "create_root_node",
    "create_container",
    # Assembly
    "TreeAssembler",
    "process_frontend_fn",
    "determine_interactivity",
    "has_no_default_value",
    "process_server_fn",
    "create_target_meta",
    "get_inputs_outputs",
    # Loading
    "ComponentLoader",
    "ImportModuleSource",
    "LoadedModule",
    "ModuleSource",
    "RegistryModuleSource",
    "ResolvedComponent",
    "LoadingStatus",
    "ComponentLoadingStatus",
    # Models
    "AppConfig",
    "ComponentMeta",
    "Dependency",
    "LayoutNode",
    "TargetMap",
    "UpdateTransaction",
    "parse_app_config",
    "load_app_config",
    # Updates
    "FrameScheduler",
    "LoopFrameScheduler",
    "UpdateScheduler",
    "Writable",
]
