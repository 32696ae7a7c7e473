"""codicibot - Crowdsourced OpenMove ticketing codes for Trentino public transport."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("codicibot")
except PackageNotFoundError:
    __version__ = "0+local"
from codicibot.bot import CodiciBot
from codicibot.config import CodiciConfig
from codicibot.consensus import ConsensusEngine
from codicibot.exceptions import (
    CodiciApiError,
    CodiciConfigError,
    CodiciError,
    CodiciSessionError,
    CodiciStoreError,
    CodiciStoreTimeoutError,
    CodiciTransportError,
)
from codicibot.models import (
    CodeRecord,
    EventKind,
    InboundEvent,
    OutcomeKind,
    QueryResult,
    QueryStatus,
    SubmissionOutcome,
    VehicleKey,
    VehicleKind,
)
from codicibot.polling import CodiciPoller
from codicibot.query import QueryResolver
from codicibot.sessions import DialoguePhase, DialogueSession, SessionTracker
from codicibot.store import CodeStore, InMemoryCodeStore, SqliteCodeStore

__all__ = [
    "__version__",
    "CodeRecord",
    "CodeStore",
    "CodiciApiError",
    "CodiciBot",
    "CodiciConfig",
    "CodiciConfigError",
    "CodiciError",
    "CodiciPoller",
    "CodiciSessionError",
    "CodiciStoreError",
    "CodiciStoreTimeoutError",
    "CodiciTransportError",
    "ConsensusEngine",
    "DialoguePhase",
    "DialogueSession",
    "EventKind",
    "InMemoryCodeStore",
    "InboundEvent",
    "OutcomeKind",
    "QueryResolver",
    "QueryResult",
    "QueryStatus",
    "SessionTracker",
    "SqliteCodeStore",
    "SubmissionOutcome",
    "VehicleKey",
    "VehicleKind",
]
