"""
HomeValet Connectivity - Reachability probe with exponential backoff

The orchestrator consults ``is_online`` before each turn and refuses to
contact the completion service while the monitor reports offline. The
monitor never probes on its own; callers run ``check()`` or
``wait_until_online()`` when it suits them, and ``mark_offline()`` records a
network failure seen elsewhere.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_PROBE_URL = "https://www.google.com/favicon.ico"


class ConnectivityMonitor:
    """
    Tracks whether the network is reachable.

    Any HTTP response from the probe URL counts as online, whatever its
    status; only transport failures (DNS, connect, timeout) count as offline.

    Example:
        monitor = ConnectivityMonitor(probe_url="https://example.com/health")
        if not await monitor.check():
            await monitor.wait_until_online(max_attempts=5)
    """

    def __init__(
        self,
        probe_url: str = DEFAULT_PROBE_URL,
        http_client: Optional[httpx.AsyncClient] = None,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        timeout: float = 3.0,
    ):
        self.probe_url = probe_url
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.timeout = timeout

        self._client = http_client
        self._owns_client = http_client is None

        # Optimistic until a probe says otherwise
        self.is_online = True
        self.is_connecting = False
        self.last_connected: Optional[datetime] = None
        self.last_checked: Optional[datetime] = None
        self.attempts = 0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    def next_delay(self, attempt: int) -> float:
        """Backoff before retry number ``attempt`` (0-based), capped at max_delay"""
        return min(self.base_delay * (2 ** attempt), self.max_delay)

    async def check(self) -> bool:
        """Probe once and update the status"""
        self.is_connecting = True
        self.attempts += 1
        try:
            await self._get_client().get(self.probe_url)
            reachable = True
        except httpx.HTTPError as e:
            logger.debug(f"[Connectivity] probe failed: {e}")
            reachable = False
        finally:
            self.is_connecting = False
            self.last_checked = datetime.now()

        if reachable:
            if not self.is_online:
                logger.info("[Connectivity] connection restored")
            self.last_connected = datetime.now()
            self.attempts = 0
        elif self.is_online:
            logger.warning("[Connectivity] connection lost")

        self.is_online = reachable
        return reachable

    def mark_offline(self, reason: str = "") -> None:
        """Record a failure seen outside a probe, e.g. a dropped completion request"""
        if self.is_online:
            logger.warning(f"[Connectivity] marked offline: {reason}")
        self.is_online = False

    async def wait_until_online(self, max_attempts: int = 5) -> bool:
        """
        Probe until reachable, sleeping with exponential backoff in between.

        Returns:
            True once a probe succeeds, False after ``max_attempts`` failures
        """
        for attempt in range(max_attempts):
            if await self.check():
                return True
            if attempt + 1 < max_attempts:
                delay = self.next_delay(attempt)
                logger.info(
                    f"[Connectivity] retrying in {delay:g}s (attempt {attempt + 2}/{max_attempts})"
                )
                await asyncio.sleep(delay)
        return False

    def get_status(self) -> dict:
        return {
            "online": self.is_online,
            "connecting": self.is_connecting,
            "attempts": self.attempts,
            "last_checked": self.last_checked.isoformat() if self.last_checked else None,
            "last_connected": self.last_connected.isoformat() if self.last_connected else None,
        }

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
