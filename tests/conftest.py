"""Pytest configuration and fixtures."""

import os
import asyncio
from types import SimpleNamespace
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from uitree.loader import ComponentLoader, LoadedModule, RegistryModuleSource


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ['UITREE_LOG_LEVEL'] = 'DEBUG'
    os.environ['UITREE_FRAME_INTERVAL'] = '0'


# ============================================================================
# Fake collaborators
# ============================================================================

class Textbox:
    """Stand-in textbox implementation."""


class TextboxExample:
    """Stand-in textbox example implementation."""


class Button:
    """Stand-in button implementation."""


class Column:
    """Stand-in column implementation."""


class Dataset:
    """Stand-in dataset implementation."""


class ManualFrameScheduler:
    """Frame scheduler whose frames run only when the test says so."""

    def __init__(self) -> None:
        self.callbacks: list[Callable[[], None]] = []

    def request_frame(self, callback: Callable[[], None]) -> None:
        self.callbacks.append(callback)

    def run_frame(self) -> int:
        callbacks, self.callbacks = self.callbacks, []
        for callback in callbacks:
            callback()
        return len(callbacks)


class CountingSource:
    """Wraps a module source and counts fetches per (class id, variant)."""

    def __init__(self, inner: RegistryModuleSource, delay: float = 0.0) -> None:
        self.inner = inner
        self.delay = delay
        self.calls: list[tuple[str, str]] = []

    async def fetch_module(
        self, root_url: str, type_name: str, class_id: str, variant: str
    ) -> LoadedModule:
        self.calls.append((class_id, variant))
        await asyncio.sleep(self.delay)
        return await self.inner.fetch_module(root_url, type_name, class_id, variant)


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def impls():
    """Stand-in implementation classes by type name."""
    return SimpleNamespace(
        column=Column,
        textbox=Textbox,
        textbox_example=TextboxExample,
        button=Button,
        dataset=Dataset,
    )


@pytest.fixture
def registry_source():
    """Module source with the stand-in implementations registered."""
    source = RegistryModuleSource()
    source.register("column", Column)
    source.register("textbox", Textbox)
    source.register("textbox", TextboxExample, variant="example")
    source.register("button", Button)
    source.register("dataset", Dataset)
    return source


@pytest.fixture
def counting_source(registry_source):
    """Counting wrapper around the registry source."""
    return CountingSource(registry_source, delay=0.01)


@pytest.fixture
def loader(counting_source):
    """Component loader over the counting source."""
    return ComponentLoader(counting_source)


@pytest.fixture
def frame_scheduler():
    """Manually driven frame scheduler."""
    return ManualFrameScheduler()


@pytest.fixture
def remote_client():
    """Mock remote procedure client."""
    client = AsyncMock()
    client.component_server.return_value = {"ok": True}
    return client


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def sample_components() -> list[dict[str, Any]]:
    """Component metadata for a small two-textbox app."""
    return [
        {"id": 1, "type": "row", "props": {}, "component_class_id": "row-cls"},
        {"id": 2, "type": "textbox", "props": {"value": ""}, "component_class_id": "textbox-cls"},
        {"id": 3, "type": "textbox", "props": {"value": "hello"}, "component_class_id": "textbox-cls"},
        {
            "id": 4,
            "type": "button",
            "props": {"value": "Run", "server_fns": ["preprocess"]},
            "component_class_id": "button-cls",
        },
    ]


@pytest.fixture
def sample_layout() -> dict[str, Any]:
    """Layout: root(0) -> row(1) -> [textbox(2), textbox(3)], button(4)."""
    return {
        "id": 0,
        "children": [
            {"id": 1, "children": [{"id": 2}, {"id": 3}]},
            {"id": 4},
        ],
    }


@pytest.fixture
def sample_dependencies() -> list[dict[str, Any]]:
    """Button click copies textbox 2 into textbox 3."""
    return [
        {
            "targets": [[4, "click"], [2, "submit"]],
            "inputs": [2],
            "outputs": [3],
            "backend_fn": True,
            "js": None,
        },
        {
            "targets": [[4, "click"]],
            "inputs": [],
            "outputs": [3],
            "backend_fn": False,
            "js": "lambda: 'cleared'",
        },
    ]


@pytest.fixture
def sample_payload(sample_components, sample_layout, sample_dependencies) -> dict[str, Any]:
    """Whole server payload."""
    return {
        "components": sample_components,
        "layout": sample_layout,
        "dependencies": sample_dependencies,
        "root": "http://localhost:7860",
        "fill_height": True,
    }

