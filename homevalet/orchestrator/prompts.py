"""System prompt for the HomeValet assistant.

Modular prompt system: each section is a function that returns a string
(empty when it has nothing to say). Sections are composed in
build_system_prompt() from an environment snapshot, the user profile and the
tool catalog. Nothing here performs I/O.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..environment.models import Device, EnvironmentContext
from ..protocols import EnvironmentProtocol
from ..tools.models import ToolDefinition
from ..tools.registry import ToolRegistry

DEFAULT_ASSISTANT_NAME = "Clixsy"


@dataclass(frozen=True)
class UserProfile:
    """Who the assistant is talking to"""
    name: Optional[str] = None
    preferred_name: Optional[str] = None
    id: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.preferred_name or self.name or "User"


# ---------------------------------------------------------------------------
# Section renderers: each returns a prompt fragment or empty string
# ---------------------------------------------------------------------------

def format_device(device: Device) -> str:
    state = "ON" if device.state else "OFF"
    details = []
    if device.brightness is not None:
        details.append(f"{device.brightness}% brightness")
    if device.temperature is not None:
        details.append(f"{device.temperature:g}°C")
    if device.mode:
        details.append(f"mode: {device.mode}")
    suffix = f" - {', '.join(details)}" if details else ""
    return f"  - {device.name} ({device.type}): {state}{suffix}"


def render_preamble(assistant_name: str) -> str:
    return (
        f"You are {assistant_name}, a friendly and intelligent AI assistant for a "
        "smart mirror system that controls the user's smart home."
    )


def render_user_context(user_name: str, context: EnvironmentContext) -> str:
    room = context.current_room
    room_line = f"- Current room: {room.name}" if room else "- Current room: Not specified"
    return f"""
## USER CONTEXT
- Name: {user_name}
- Current time: {context.time_of_day}
{room_line}
""".strip()


def render_current_room(context: EnvironmentContext) -> str:
    room = context.current_room
    if room is None:
        return ""
    if room.devices:
        devices = "\n".join(format_device(d) for d in room.devices)
    else:
        devices = "No devices in this room"
    return f"### CURRENT ROOM DEVICES ({room.name}):\n{devices}"


def render_rooms(context: EnvironmentContext) -> str:
    if not context.rooms:
        return ""
    lines = "\n".join(f"- {r.name} ({r.device_count} devices)" for r in context.rooms)
    return f"### AVAILABLE ROOMS:\n{lines}"


def render_recent_actions(context: EnvironmentContext) -> str:
    if not context.recent_actions:
        return ""
    lines = "\n".join(
        f"- {a.type} at {a.timestamp.strftime('%H:%M:%S')}" for a in context.recent_actions
    )
    return f"### RECENT ACTIONS:\n{lines}"


def render_capabilities(tools: Sequence[ToolDefinition]) -> str:
    if not tools:
        return ""
    lines = "\n".join(f"- {t.name}: {t.description}" for t in tools)
    return f"""
## CAPABILITIES & TOOLS
You can control smart home devices using function calls. Available tools:
{lines}
""".strip()


def render_guidelines(user_name: str, context: EnvironmentContext) -> str:
    room = context.current_room
    room_name = room.name if room else "rooms"
    return f"""
## CONVERSATIONAL RULES
1. Always acknowledge what {user_name} said and use their name naturally.
2. Reference the current room ({room_name}) when relevant.
3. When controlling devices, use function calls AND provide natural feedback.
4. Use device and room ids from the context above as tool arguments.
5. Ask a clarifying question when the target device or room is ambiguous.
6. For security actions (locks), ask for confirmation first.
7. If a device isn't found, suggest alternatives or other rooms.
""".strip()


def render_response_style() -> str:
    return """
## RESPONSE STYLE
- **Concise**: Keep responses under 50 words when possible.
- **Natural**: Use conversational language, not robotic responses.
- **Contextual**: Reference room names, device states and recent actions.
- **Confirmatory**: Acknowledge actions after executing them.
""".strip()


# ---------------------------------------------------------------------------
# Composer: assembles the final system prompt
# ---------------------------------------------------------------------------

def build_system_prompt(
    context: EnvironmentContext,
    profile: UserProfile,
    tools: Sequence[ToolDefinition],
    assistant_name: str = DEFAULT_ASSISTANT_NAME,
) -> str:
    """Build the full system prompt from modular sections.

    Args:
        context: Environment snapshot
        profile: User profile (display name resolution)
        tools: Tool catalog, listed with descriptions
        assistant_name: Name the assistant introduces itself with

    Returns:
        Complete system prompt string.
    """
    user_name = profile.display_name

    home_sections = [
        render_current_room(context),
        render_rooms(context),
        render_recent_actions(context),
    ]
    home = "\n\n".join(s for s in home_sections if s)

    sections = [
        render_preamble(assistant_name),
        render_user_context(user_name, context),
        f"## SMART HOME CONTEXT\n{home}" if home else "",
        render_capabilities(tools),
        render_guidelines(user_name, context),
        render_response_style(),
    ]
    return "\n\n".join(s for s in sections if s)


class PromptBuilder:
    """
    Builds context-aware system prompts from live environment state.

    Example:
        builder = PromptBuilder(environment, UserProfile(name="Dana"), registry)
        system_prompt = builder.build_system_prompt()
        tools = builder.get_tools()
    """

    def __init__(
        self,
        environment: EnvironmentProtocol,
        profile: Optional[UserProfile] = None,
        registry: Optional[ToolRegistry] = None,
        assistant_name: str = DEFAULT_ASSISTANT_NAME,
    ):
        self.environment = environment
        self.profile = profile or UserProfile()
        self.registry = registry or ToolRegistry()
        self.assistant_name = assistant_name

    def build_system_prompt(self, context: Optional[EnvironmentContext] = None) -> str:
        """Render the prompt for ``context``, or for a fresh snapshot when omitted"""
        if context is None:
            context = self.environment.snapshot()
        return build_system_prompt(
            context,
            self.profile,
            self.registry.list_definitions(),
            assistant_name=self.assistant_name,
        )

    def get_tools(self) -> Tuple[ToolDefinition, ...]:
        """Tools to advertise to the completion service"""
        return self.registry.list_definitions()
