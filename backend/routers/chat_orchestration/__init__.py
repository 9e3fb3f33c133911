"""
Parley Chat Orchestration - turn handling components

Components:
- TurnHandler: provider state machine (initial call -> tool -> follow-up)
- TurnDispatcher: request validation, provider routing, persistence

Tool policy:
    MAX_TOOL_CALLS_PER_TURN caps how many requested tool calls are
    executed per turn (1: first call wins). Executed calls run in order;
    the first failure ends the turn with an error message and no follow-up.
"""

from .turn_handler import FALLBACK_MESSAGE, MAX_TOOL_CALLS_PER_TURN, TurnHandler, TurnState
from .dispatcher import TurnDispatcher

__all__ = [
    "FALLBACK_MESSAGE",
    "MAX_TOOL_CALLS_PER_TURN",
    "TurnHandler",
    "TurnState",
    "TurnDispatcher",
]
