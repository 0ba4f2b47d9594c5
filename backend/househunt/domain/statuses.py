# backend/househunt/domain/statuses.py
from __future__ import annotations

from enum import Enum


class HomeStatus(str, Enum):
    """
    Review status of a home. Listed in the usual order of a search, but any
    status may follow any other.
    """

    NEW = "New"
    CONTACTED = "Contacted"
    SEEN = "Seen"
    LIKED = "Liked"
    DISLIKED = "Disliked"
    OFFER_MADE = "Offer Made"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


STATUS_VALUES: tuple[str, ...] = tuple(s.value for s in HomeStatus)
DEFAULT_STATUS = HomeStatus.NEW.value


def normalize_status(raw: str | None) -> str:
    """
    Canonical spelling for a status. Case and separator differences are
    tolerated ("offer_made" -> "Offer Made"); anything else is a ValueError.
    """
    s = " ".join((raw or "").replace("_", " ").replace("-", " ").split()).lower()
    for value in STATUS_VALUES:
        if value.lower() == s:
            return value
    raise ValueError(f"unknown status {raw!r}; expected one of: {', '.join(STATUS_VALUES)}")
