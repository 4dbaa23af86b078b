"""Lazily constructed, process-wide Cloud Monitoring client handle."""
from enum import Enum
from typing import Any, Callable, Optional
import logging
import threading

logger = logging.getLogger(__name__)


class ClientState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DISABLED = "disabled"


def create_metric_client() -> Any:
    """Create a MetricServiceClient using application default credentials."""
    from google.cloud import monitoring_v3

    return monitoring_v3.MetricServiceClient()


class MetricClientHandle:
    """
    Owns the client and builds it at most once.

    The first get() runs the factory under a lock; concurrent callers block
    until it finishes and then see the same outcome. A failed construction
    disables the handle for good.
    """

    def __init__(self, factory: Optional[Callable[[], Any]] = None):
        self._factory = factory or create_metric_client
        self._lock = threading.Lock()
        self._client: Any = None
        self._state = ClientState.UNINITIALIZED
        self.construction_attempts = 0

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ClientState.READY

    @property
    def is_disabled(self) -> bool:
        return self._state is ClientState.DISABLED

    def get(self) -> Any:
        """Return the client, or None if construction failed."""
        if self._state is ClientState.UNINITIALIZED:
            with self._lock:
                if self._state is ClientState.UNINITIALIZED:
                    self._initialize()
        return self._client

    def _initialize(self):
        self.construction_attempts += 1
        try:
            client = self._factory()
        except Exception as e:
            logger.error(f"Metrics disabled, failed to create Monitoring client: {e}")
            self._state = ClientState.DISABLED
            return

        # Publish the client before the state so lock-free readers never see READY with None
        self._client = client
        self._state = ClientState.READY
        logger.info("Cloud Monitoring client initialized")


_default_handle: Optional[MetricClientHandle] = None
_default_handle_lock = threading.Lock()


def default_handle() -> MetricClientHandle:
    """Return the process-wide handle, creating it on first use."""
    global _default_handle
    if _default_handle is None:
        with _default_handle_lock:
            if _default_handle is None:
                _default_handle = MetricClientHandle()
    return _default_handle
