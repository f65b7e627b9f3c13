from .generation import GenerationService
from .ledger import ReviewLedger
from .review_session import ReviewSession

__all__ = ["GenerationService", "ReviewLedger", "ReviewSession"]
