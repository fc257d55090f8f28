"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from .clients.backend import ComponentServerClient
from .core import Settings, configure_logging, get_settings
from .loader import ComponentLoader, ImportModuleSource, ModuleSource


class SessionModule(Module):
    """Collaborators of one app session."""

    def __init__(self, root_url: str | None = None, session_hash: str | None = None) -> None:
        self.root_url = root_url
        self.session_hash = session_hash

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        """Provide session settings."""
        return get_settings()

    @singleton
    @provider
    def provide_client(self, settings: Settings) -> ComponentServerClient:
        """Provide component server client."""
        return ComponentServerClient(
            self.root_url or settings.root_url,
            timeout=settings.request_timeout,
            session_hash=self.session_hash,
            fail_max=settings.breaker_fail_max,
            reset_timeout=settings.breaker_reset_timeout,
        )

    @singleton
    @provider
    def provide_module_source(self, settings: Settings) -> ModuleSource:
        """Provide import-based module source."""
        return ImportModuleSource(settings.component_package)

    @singleton
    @provider
    def provide_loader(self, source: ModuleSource) -> ComponentLoader:
        """Provide the session's component loader."""
        return ComponentLoader(source)


def create_container(root_url: str | None = None, session_hash: str | None = None) -> Injector:
    """Configure logging from settings and create the session injector."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.json_logs)
    return Injector([SessionModule(root_url, session_hash)])
