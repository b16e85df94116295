"""Post-commit notifications that a merchant has satisfied an onboarding section."""
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

SectionListener = Callable[[str, str], None]


class SectionSignals:
    """
    Managers publish (merchant_id, section) once their own transaction has
    committed; subscribers (the onboarding status engine) update derived state.
    Listener errors propagate to the publisher.
    """

    def __init__(self):
        self._listeners: List[SectionListener] = []

    def subscribe(self, listener: SectionListener) -> None:
        self._listeners.append(listener)

    def publish(self, merchant_id: str, section: str) -> None:
        logger.debug("Section signal %s for merchant %s", section, merchant_id)
        for listener in self._listeners:
            listener(merchant_id, section)
