"""Focus sessions - interactive timer controller for Flow CLI."""

from .controller import SessionController
from .history import HistoryStore
from .keyboard import KeyboardHandler
from .methodology import MethodologyDescriptor, for_methodology
from .ports import SessionPorts
from .snapshot import SessionSnapshot
from .state import SessionState, SessionStateManager
from .sync import SyncLoop
from .ui import TimerDisplay

__all__ = [
    "SessionController",
    "SessionPorts",
    "SessionSnapshot",
    "SessionState",
    "SessionStateManager",
    "SyncLoop",
    "TimerDisplay",
    "KeyboardHandler",
    "HistoryStore",
    "MethodologyDescriptor",
    "for_methodology",
]
