"""
HomeValet - Conversational control layer for a smart home

HomeValet turns natural-language requests into device actions. A system
prompt is built from live room and device state, the reply is streamed from
an OpenAI-compatible chat completions endpoint, and any function calls it
contains are validated against the tool catalog and dispatched to the
device backend one at a time.

Quick Start:
    from homevalet import HomeValet

    app = HomeValet("config.yaml")
    result = await app.chat("Turn off all the lights in the bedroom")
    print(result.reply)

Building the pipeline by hand:
    from homevalet import (
        HomeEnvironment, InMemorySmartHomeProvider, ToolRegistry, ToolExecutor,
        PromptBuilder, UserProfile, StreamingClient, LLMConfig, Orchestrator,
    )

    env = HomeEnvironment.from_config(home_cfg)
    registry = ToolRegistry()
    executor = ToolExecutor(InMemorySmartHomeProvider(env), env, registry)
    builder = PromptBuilder(env, UserProfile(name="Dana"), registry)
    client = StreamingClient(LLMConfig(model="gpt-4o-mini", api_key="sk-xxx"))
    orchestrator = Orchestrator(client, builder, executor)
"""

__version__ = "0.1.0"

from .app import HomeValet, ConfigError
from .connectivity import ConnectivityMonitor
from .environment import (
    Device,
    DeviceCategory,
    EnvironmentContext,
    HomeEnvironment,
    Room,
)
from .llm import LLMConfig, StreamingClient, TransportError
from .orchestrator import (
    ChatMessage,
    MessageRole,
    Orchestrator,
    PromptBuilder,
    TurnInProgressError,
    TurnResult,
    UserProfile,
)
from .protocols import ActionsProtocol, CompletionClientProtocol, EnvironmentProtocol
from .providers.smarthome import BaseSmartHomeProvider, InMemorySmartHomeProvider
from .streaming import EventType, TurnEvent
from .tools import (
    DEFAULT_TOOLS,
    ExecutionOutcome,
    ToolDefinition,
    ToolExecutor,
    ToolRegistry,
)

__all__ = [
    "__version__",
    # Application
    "HomeValet",
    "ConfigError",
    "ConnectivityMonitor",
    # Environment
    "Device",
    "DeviceCategory",
    "EnvironmentContext",
    "HomeEnvironment",
    "Room",
    # Completion service
    "LLMConfig",
    "StreamingClient",
    "TransportError",
    # Orchestration
    "ChatMessage",
    "MessageRole",
    "Orchestrator",
    "PromptBuilder",
    "TurnInProgressError",
    "TurnResult",
    "UserProfile",
    # Protocols
    "ActionsProtocol",
    "CompletionClientProtocol",
    "EnvironmentProtocol",
    # Providers
    "BaseSmartHomeProvider",
    "InMemorySmartHomeProvider",
    # Streaming
    "EventType",
    "TurnEvent",
    # Tools
    "DEFAULT_TOOLS",
    "ExecutionOutcome",
    "ToolDefinition",
    "ToolExecutor",
    "ToolRegistry",
]
