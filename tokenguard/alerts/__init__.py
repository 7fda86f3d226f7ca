from .decider import AlertDecider, AlertDecision, AlertLevel, AlertState, level_for_status
from .sinks import Event, FileSink, LoggingSink, Sink, dispatch, event_from_decision

__all__ = [
    "AlertDecider",
    "AlertDecision",
    "AlertLevel",
    "AlertState",
    "Event",
    "FileSink",
    "LoggingSink",
    "Sink",
    "dispatch",
    "event_from_decision",
    "level_for_status",
]
