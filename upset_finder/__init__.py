"""Seed upset detection over start.gg tournament results."""

from .detector import UpsetDetector
from .models import (
    Entrant,
    Event,
    Match,
    PhaseGroup,
    Player,
    Tournament,
    UpsetRecord,
)
from .pronouns import PronounPolicy, matches_she_her
from .reconcile import EntityReconciler, ReconciliationContext
from .storage import CsvUpsetSink, DynamoUpsetStorage
from .tiers import SEED_FLOORS, tier_of

__all__ = [
    "CsvUpsetSink",
    "DynamoUpsetStorage",
    "EntityReconciler",
    "Entrant",
    "Event",
    "Match",
    "PhaseGroup",
    "Player",
    "PronounPolicy",
    "ReconciliationContext",
    "SEED_FLOORS",
    "Tournament",
    "UpsetDetector",
    "UpsetRecord",
    "matches_she_her",
    "tier_of",
]
