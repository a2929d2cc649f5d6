"""Answer pipeline: mode gating, knowledge context and provider fallback."""

from .dispatcher import MessageDispatcher, ReplyPayload
from .generator import AnswerGenerator, GenerationResult, ProviderRole
from .modes import ConversationModeStore, ConversationState, Mode, resolve_mode

__all__ = [
    "MessageDispatcher",
    "ReplyPayload",
    "AnswerGenerator",
    "GenerationResult",
    "ProviderRole",
    "ConversationModeStore",
    "ConversationState",
    "Mode",
    "resolve_mode",
]
