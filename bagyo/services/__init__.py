"""Core services: classification, alerting, projection and orchestration."""

from .alert_ledger import AlertLedger, LedgerResult, Notification, render_message
from .classifier import classify
from .notifier import (
    LoggingNotifier,
    Notifier,
    PulseCategory,
    PulsePattern,
    WebhookNotifier,
    build_notifier,
    pulse_pattern_for,
)
from .orchestrator import (
    CycleState,
    ThreatAssessmentOrchestrator,
    ThreatStore,
    build_orchestrator,
)
from .projector import project

__all__ = [
    "AlertLedger",
    "CycleState",
    "LedgerResult",
    "LoggingNotifier",
    "Notification",
    "Notifier",
    "PulseCategory",
    "PulsePattern",
    "ThreatAssessmentOrchestrator",
    "ThreatStore",
    "WebhookNotifier",
    "build_notifier",
    "build_orchestrator",
    "classify",
    "project",
    "pulse_pattern_for",
    "render_message",
]
