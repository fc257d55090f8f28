"""Component Server Client"""

from typing import Any, Protocol

import httpx
import pybreaker

from ..core import get_logger, RemoteInvocationError
from ..core.json import decode_json, JSONParseError
from ..monitoring import metrics_collector

logger = get_logger(__name__)


class RemoteClient(Protocol):
    """Anything able to invoke a component's server function."""

    async def component_server(self, component_id: int, fn_name: str, data: Any) -> Any:
        """Invoke ``fn_name`` on the backend for ``component_id``."""
        ...


class BreakerListener(pybreaker.CircuitBreakerListener):
    """Listener for circuit breaker state changes."""

    def state_change(self, cb, old_state, new_state):
        """Called when circuit breaker state changes."""
        logger.warning(
            "breaker_state_change",
            breaker=cb.name,
            from_state=str(old_state),
            to_state=str(new_state),
        )


class ComponentServerClient:
    """
    Client for component server functions with circuit breaker protection.
    Calls are never retried; failures surface as RemoteInvocationError.
    """

    def __init__(
        self,
        root_url: str = "http://localhost:7860",
        timeout: float = 30.0,
        session_hash: str | None = None,
        fail_max: int = 5,
        reset_timeout: int = 30,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize component server client.

        Args:
            root_url: Root URL of the app
            timeout: Request timeout in seconds
            session_hash: Session the calls belong to
            fail_max: Consecutive failures before the breaker opens
            reset_timeout: Seconds before an open breaker half-opens
            http_client: Preconfigured client (tests, shared pools)
        """
        self.root_url = root_url.rstrip("/")
        self.timeout = timeout
        self.session_hash = session_hash
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

        self._breaker = pybreaker.CircuitBreaker(
            fail_max=fail_max,
            reset_timeout=reset_timeout,
            name="component-server",
            listeners=[BreakerListener()],
        )

        logger.info("client_init", url=self.root_url)

    async def component_server(self, component_id: int, fn_name: str, data: Any) -> Any:
        """
        Invoke a server function of a component.

        Args:
            component_id: Component the function belongs to
            fn_name: Server function name
            data: Arguments, already unwrapped by the binder

        Returns:
            Decoded JSON result

        Raises:
            RemoteInvocationError: On HTTP, transport or decoding failure, or
                when the circuit breaker is open
        """
        url = f"{self.root_url}/component_server/"
        body = {
            "data": data,
            "component_id": component_id,
            "fn_name": fn_name,
            "session_hash": self.session_hash,
        }

        try:
            with self._breaker.calling():
                response = await self._client.post(url, json=body)
                response.raise_for_status()
            result = decode_json(response.content)
        except pybreaker.CircuitBreakerError as e:
            metrics_collector.record_remote_call("breaker_open")
            logger.error("component_server_failed", fn=fn_name, error="circuit breaker open")
            raise RemoteInvocationError(
                f"Backend unavailable for {fn_name}", component_id=component_id, fn_name=fn_name
            ) from e
        except httpx.HTTPStatusError as e:
            metrics_collector.record_remote_call("http_error")
            logger.warning("http_error", fn=fn_name, status=e.response.status_code)
            raise RemoteInvocationError(
                f"{fn_name} failed with status {e.response.status_code}",
                component_id=component_id,
                fn_name=fn_name,
            ) from e
        except httpx.HTTPError as e:
            metrics_collector.record_remote_call("transport_error")
            logger.warning("transport_error", fn=fn_name, error=str(e))
            raise RemoteInvocationError(
                f"{fn_name} failed: {e}", component_id=component_id, fn_name=fn_name
            ) from e
        except JSONParseError as e:
            metrics_collector.record_remote_call("decode_error")
            logger.error("invalid_response", fn=fn_name, error=str(e))
            raise RemoteInvocationError(
                f"{fn_name} returned invalid JSON", component_id=component_id, fn_name=fn_name
            ) from e

        metrics_collector.record_remote_call("success")
        return result

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
