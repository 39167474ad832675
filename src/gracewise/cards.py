from __future__ import annotations

import logging
from typing import Iterable, Optional

from .models import Card, default_card


logger = logging.getLogger(__name__)


def normalize_card_id(card_id: object) -> str:
    return str(card_id or "").strip()


class CardDirectory:
    """
    Lookup table from card id to Card, built once per batch.

    Unknown or empty references resolve to the default card instead of failing, so a
    transaction whose card was deleted can still be analysed.
    """

    def __init__(self, cards: Iterable[Card], default: Optional[Card] = None) -> None:
        self._default = default or default_card()
        self._by_id: dict[str, Card] = {}
        for card in cards:
            key = normalize_card_id(card.id)
            if not key:
                continue
            # Later records win, same as a re-saved card replacing the old one.
            self._by_id[key] = card

    @property
    def default(self) -> Card:
        return self._default

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, card_id: object) -> bool:
        return normalize_card_id(card_id) in self._by_id

    def find(self, card_id: object) -> Optional[Card]:
        return self._by_id.get(normalize_card_id(card_id))

    def get(self, card_id: object) -> Card:
        card = self.find(card_id)
        if card is None:
            logger.debug("Card %r not found; using default billing configuration", card_id)
            return self._default
        return card
