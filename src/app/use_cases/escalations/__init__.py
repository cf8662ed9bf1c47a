"""
Escalation Use Cases
"""

from .check_escalations_use_case import CheckEscalationsUseCase
from .dtos import (
    EscalationCheckResponse,
    EscalationEventInfo,
    EscalationRuleInfo,
    EscalationRulesResponse,
    SlaDefaultInfo,
)
from .escalation_events_use_case import ListEscalationEventsUseCase, ResolveEscalationUseCase
from .escalation_rules_use_case import (
    ListEscalationRulesUseCase,
    SeedEscalationRulesUseCase,
    UpsertEscalationRuleUseCase,
)

__all__ = [
    "CheckEscalationsUseCase",
    "EscalationCheckResponse",
    "EscalationEventInfo",
    "EscalationRuleInfo",
    "EscalationRulesResponse",
    "ListEscalationEventsUseCase",
    "ListEscalationRulesUseCase",
    "ResolveEscalationUseCase",
    "SeedEscalationRulesUseCase",
    "SlaDefaultInfo",
    "UpsertEscalationRuleUseCase",
]
