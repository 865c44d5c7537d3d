"""
Discount repository: read-only view of venues and their discount rules.

Stands in for the hosted record store. Venue partners create and edit rules
elsewhere; this side only reads them at quote time. Rows are kept in their
flat stored shape and adapted to discount variants on the way out.

The data file is JSON shaped like:

    {
      "venues": [{"id": "v1", "name": "...", "default_discount_percentage": 10,
                  "timezone": "Europe/Tbilisi"}],
      "venue_discounts": [{"id": "d1", "venue_id": "v1",
                           "discount_type": "percentage", ...}]
    }
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from venue_booking.domain.models import DiscountRule, Venue, discount_rule_from_record

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class VenueNotFoundError(LookupError):
    """No venue record with the requested id."""


def _created_at(row: dict[str, Any]) -> datetime:
    value = row.get("created_at")
    if not value:
        return _EPOCH
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Discount %s has unreadable created_at %r", row.get("id"), value)
            return _EPOCH
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class DiscountRepository:
    """In-memory venue and `venue_discounts` tables."""

    def __init__(
        self,
        venues: list[dict[str, Any]] | None = None,
        discounts: list[dict[str, Any]] | None = None,
    ) -> None:
        self._venues: dict[str, dict[str, Any]] = {str(v["id"]): v for v in venues or []}
        self._discounts: list[dict[str, Any]] = list(discounts or [])

    @classmethod
    def from_file(cls, path: str | Path) -> "DiscountRepository":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        repo = cls(data.get("venues", []), data.get("venue_discounts", []))
        logger.info(
            "Loaded %d venues and %d discount rows from %s",
            len(repo._venues),
            len(repo._discounts),
            path,
        )
        return repo

    async def get_venue(self, venue_id: str) -> Venue:
        row = self._venues.get(venue_id)
        if row is None:
            raise VenueNotFoundError(f"Venue {venue_id} not found")
        return Venue.model_validate(row)

    async def list_active_rules(self, venue_id: str) -> list[DiscountRule]:
        """Active rules for one venue, most recently created first."""
        rows = [
            row
            for row in self._discounts
            if str(row.get("venue_id")) == venue_id and row.get("active", True)
        ]
        rows.sort(key=_created_at, reverse=True)
        rules = []
        for row in rows:
            rule = discount_rule_from_record(row)
            if rule is None:
                logger.warning("Ignoring discount %s of venue %s", row.get("id"), venue_id)
                continue
            rules.append(rule)
        return rules
