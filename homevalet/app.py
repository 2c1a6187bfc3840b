"""
HomeValet Application - Single entry point for the smart home assistant.

Usage:
    from homevalet import HomeValet

    app = HomeValet("config.yaml")

    result = await app.chat("Turn on the desk lamp")
    print(result.reply)

    async for event in app.stream("Make it 22 degrees"):
        ...

    await app.close()
"""

import logging
import os
import re
from typing import Any, AsyncIterator, Dict, Optional

import yaml

from .connectivity import DEFAULT_PROBE_URL, ConnectivityMonitor
from .environment import HomeEnvironment
from .llm import LLMConfig, StreamingClient
from .orchestrator import Orchestrator, PromptBuilder, TurnResult, UserProfile
from .orchestrator.prompts import DEFAULT_ASSISTANT_NAME
from .providers.smarthome import InMemorySmartHomeProvider
from .streaming.models import TurnEvent
from .tools import ToolExecutor, ToolRegistry

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """The config file is missing a required field or references an unset variable"""


def _load_config(path: str) -> dict:
    """Read YAML config file with ${VAR} environment variable substitution."""
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    # Replace ${VAR} with environment variable values
    def _replace_env(match):
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' not set "
                f"(referenced in config file '{path}')"
            )
        return value

    resolved = re.sub(r"\$\{(\w+)\}", _replace_env, raw)
    return yaml.safe_load(resolved) or {}


class HomeValet:
    """
    HomeValet Application entry point.

    Sync constructor reads and validates config; the pipeline is assembled
    lazily on the first chat() or stream() call.

    Args:
        config: Path to YAML configuration file.

    Example:
        app = HomeValet("config.yaml")
        result = await app.chat("Dim the bedroom lamp to 30%")
    """

    def __init__(self, config: str):
        self._config = _load_config(config)
        self._initialized = False

        # Validate required fields
        llm_cfg = self._config.get("llm") or {}
        if not llm_cfg.get("model"):
            raise ConfigError("Missing required config field: 'llm.model'")

        self._environment: Optional[HomeEnvironment] = None
        self._client: Optional[StreamingClient] = None
        self._connectivity: Optional[ConnectivityMonitor] = None
        self._orchestrator: Optional[Orchestrator] = None

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    @property
    def environment(self) -> HomeEnvironment:
        self._ensure_initialized()
        return self._environment

    @property
    def orchestrator(self) -> Orchestrator:
        self._ensure_initialized()
        return self._orchestrator

    def _ensure_initialized(self) -> None:
        """Lazy initialization, runs once on first use."""
        if self._initialized:
            return

        cfg = self._config

        # 1. Completion client
        llm_config = LLMConfig.from_dict(cfg["llm"])
        self._client = StreamingClient(config=llm_config)
        logger.info(f"Completion client: model={llm_config.model}, base_url={llm_config.base_url}")

        # 2. Environment and actions
        self._environment = HomeEnvironment.from_config(cfg.get("home"))
        actions = InMemorySmartHomeProvider(self._environment)

        # 3. Tools
        user_cfg = cfg.get("user") or {}
        registry = ToolRegistry()
        executor = ToolExecutor(
            actions=actions,
            environment=self._environment,
            registry=registry,
            user_id=user_cfg.get("id"),
        )

        # 4. Prompt builder
        profile = UserProfile(
            name=user_cfg.get("name"),
            preferred_name=user_cfg.get("preferred_name"),
            id=user_cfg.get("id"),
        )
        assistant_cfg = cfg.get("assistant") or {}
        prompt_builder = PromptBuilder(
            self._environment,
            profile,
            registry,
            assistant_name=assistant_cfg.get("name") or DEFAULT_ASSISTANT_NAME,
        )

        # 5. Connectivity (optional)
        conn_cfg = cfg.get("connectivity") or {}
        if conn_cfg.get("enabled"):
            self._connectivity = ConnectivityMonitor(
                probe_url=conn_cfg.get("probe_url") or DEFAULT_PROBE_URL,
                base_delay=float(conn_cfg.get("base_delay", 1.0)),
                max_delay=float(conn_cfg.get("max_delay", 30.0)),
            )
            logger.info(f"Connectivity monitor: probe_url={self._connectivity.probe_url}")

        # 6. Orchestrator
        self._orchestrator = Orchestrator(
            client=self._client,
            prompt_builder=prompt_builder,
            executor=executor,
            connectivity=self._connectivity,
        )

        self._initialized = True
        logger.info("HomeValet initialized")

    async def _refresh_connectivity(self) -> None:
        """Probe before a turn when the monitor is unchecked or reports offline."""
        monitor = self._connectivity
        if monitor is None:
            return
        if monitor.last_checked is None or not monitor.is_online:
            await monitor.check()

    async def chat(self, message: str) -> TurnResult:
        """
        Send a message and get the turn result.

        Args:
            message: What the user said.

        Returns:
            TurnResult with the reply and one outcome per device action.
        """
        self._ensure_initialized()
        await self._refresh_connectivity()
        return await self._orchestrator.handle_message(message)

    async def stream(self, message: str) -> AsyncIterator[TurnEvent]:
        """
        Send a message and stream the turn's events.

        Returns:
            AsyncIterator of TurnEvent.
        """
        self._ensure_initialized()
        await self._refresh_connectivity()
        async for event in self._orchestrator.stream_message(message):
            yield event

    def clear_chat(self) -> None:
        """Forget the conversation so far."""
        self._ensure_initialized()
        self._orchestrator.reset()

    async def close(self) -> None:
        """Close network clients."""
        if not self._initialized:
            return
        try:
            if self._client:
                await self._client.close()
            if self._connectivity:
                await self._connectivity.close()
        except Exception as e:
            logger.warning(f"Error during shutdown: {e}")
        finally:
            self._initialized = False
            self._client = None
            self._connectivity = None
            self._orchestrator = None
            self._environment = None
            logger.info("HomeValet shut down")
