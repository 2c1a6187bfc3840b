"""
HomeValet Orchestrator - Conversation turns over the smart home

Usage:
    from homevalet.orchestrator import Orchestrator, PromptBuilder, UserProfile

    builder = PromptBuilder(environment, UserProfile(name="Dana"), registry)
    orchestrator = Orchestrator(client, builder, executor)
    result = await orchestrator.handle_message("Turn off the lights")
"""

from .models import (
    GENERIC_FAILURE_MESSAGE,
    OFFLINE_MESSAGE,
    ChatMessage,
    MessageRole,
    TurnInProgressError,
    TurnResult,
)
from .prompts import PromptBuilder, UserProfile, build_system_prompt
from .orchestrator import Orchestrator

__all__ = [
    "GENERIC_FAILURE_MESSAGE",
    "OFFLINE_MESSAGE",
    "ChatMessage",
    "MessageRole",
    "TurnInProgressError",
    "TurnResult",
    "PromptBuilder",
    "UserProfile",
    "build_system_prompt",
    "Orchestrator",
]
