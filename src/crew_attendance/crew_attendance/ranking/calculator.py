"""Group-and-rank over a month of attendance events.

Ranks are positional: ``1..N`` with no gaps and no shared ranks. Equal counts
are ordered by name (ignoring accents and case, then case-sensitive), then user id, so
the result depends only on the input.
"""

from __future__ import annotations

import unicodedata
from typing import Iterable, Optional

from ..attendance.model import AttendanceEvent
from ..core.constants import UNKNOWN_NAME
from .model import RankEntry


def name_sort_key(name: Optional[str]) -> tuple[str, str, str]:
    """Accent- and case-insensitive first, then case-insensitive, then ordinal.

    A missing name sorts as a single space, ahead of any letter.
    """
    text = unicodedata.normalize("NFC", name or " ")
    base = "".join(ch for ch in unicodedata.normalize("NFD", text) if not unicodedata.combining(ch))
    return base.casefold(), text.casefold(), text


def compute_ranking(events: Iterable[AttendanceEvent], *, requesting_user_id: Optional[str] = None) -> list[RankEntry]:
    counts: dict[str, int] = {}
    names: dict[str, Optional[str]] = {}
    avatars: dict[str, Optional[str]] = {}

    for e in events:
        counts[e.user_id] = counts.get(e.user_id, 0) + 1
        # Last event in input order wins for the display fields.
        names[e.user_id] = e.user_name or None
        avatars[e.user_id] = e.avatar_url or None

    ordered = sorted(counts, key=lambda uid: (-counts[uid], name_sort_key(names[uid]), uid))

    return [
        RankEntry(
            user_id=uid,
            display_name=names[uid] or UNKNOWN_NAME,
            avatar_url=avatars[uid],
            value=counts[uid],
            rank=index + 1,
            is_requesting_user=requesting_user_id is not None and uid == requesting_user_id,
        )
        for index, uid in enumerate(ordered)
    ]
