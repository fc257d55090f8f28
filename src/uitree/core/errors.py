"""Error taxonomy for tree assembly."""


class UITreeError(Exception):
    """Base class for all uitree errors."""

    pass


class ValidationError(UITreeError):
    """App payload could not be parsed into models."""

    pass


class LoadError(UITreeError):
    """Component implementation could not be resolved."""

    def __init__(self, message: str, class_id: str = "", variant: str = "component") -> None:
        super().__init__(message)
        self.class_id = class_id
        self.variant = variant


class CompileError(UITreeError):
    """Frontend function source is malformed."""

    def __init__(self, message: str, source: str = "") -> None:
        super().__init__(message)
        self.source = source


class RemoteInvocationError(UITreeError):
    """A bound server function call failed."""

    def __init__(self, message: str, component_id: int | None = None, fn_name: str = "") -> None:
        super().__init__(message)
        self.component_id = component_id
        self.fn_name = fn_name


__all__ = [
    "UITreeError",
    "ValidationError",
    "LoadError",
    "CompileError",
    "RemoteInvocationError",
]
