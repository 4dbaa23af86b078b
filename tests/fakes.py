"""In-memory stand-ins for the Cloud Monitoring client."""
import threading
import time


class FakeMetricClient:
    """Records create_time_series requests instead of sending them."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []
        self._lock = threading.Lock()

    def create_time_series(self, request=None, timeout=None):
        with self._lock:
            self.calls.append({"request": request, "timeout": timeout})
        if self.error is not None:
            raise self.error

    @property
    def requests(self):
        return [call["request"] for call in self.calls]


class CountingFactory:
    """Client factory that counts how often it was invoked."""

    def __init__(self, client=None, error=None, delay_s=0.0):
        self.client = client if client is not None else FakeMetricClient()
        self.error = error
        self.delay_s = delay_s
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            self.calls += 1
        if self.delay_s:
            time.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        return self.client
