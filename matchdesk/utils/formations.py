"""
Formation layouts and position categories for lineup slots.

A formation code maps to a fixed ordered list of rows; each row is a
(player count, category) pair and the goalkeeper row always comes first.
Slots are numbered 0..10 by walking the rows in order.

Pure utility, no DB dependencies.
"""

from __future__ import annotations

import re

STARTING_SLOTS = 11
DEFAULT_FORMATION = "4-4-2"

GOALKEEPER = "gk"
DEFENDER = "def"
MIDFIELDER = "mid"
FORWARD = "fwd"

# Roster partitions as returned by the team service
ROSTER_GROUP_CATEGORY: dict[str, str] = {
    "goalkeepers": GOALKEEPER,
    "defenders": DEFENDER,
    "midfielders": MIDFIELDER,
    "forwards": FORWARD,
}

FORMATION_LAYOUTS: dict[str, list[tuple[int, str]]] = {
    "4-3-3": [(1, GOALKEEPER), (4, DEFENDER), (3, MIDFIELDER), (3, FORWARD)],
    "4-4-2": [(1, GOALKEEPER), (4, DEFENDER), (4, MIDFIELDER), (2, FORWARD)],
    "4-2-3-1": [(1, GOALKEEPER), (4, DEFENDER), (2, MIDFIELDER), (3, MIDFIELDER), (1, FORWARD)],
    "4-3-2-1": [(1, GOALKEEPER), (4, DEFENDER), (3, MIDFIELDER), (2, MIDFIELDER), (1, FORWARD)],
    "3-5-2": [(1, GOALKEEPER), (3, DEFENDER), (5, MIDFIELDER), (2, FORWARD)],
    "5-3-2": [(1, GOALKEEPER), (5, DEFENDER), (3, MIDFIELDER), (2, FORWARD)],
    "4-5-1": [(1, GOALKEEPER), (4, DEFENDER), (5, MIDFIELDER), (1, FORWARD)],
}


def normalize_formation(formation: str | None) -> str | None:
    """
    Normalize a stored formation string.
    Removes suffixes like ' down', ' up', extra spaces, etc.
    Returns None if the formation is not one of the supported codes.
    """
    if not formation or not isinstance(formation, str):
        return None

    cleaned = formation.lower().replace(" down", "").replace(" up", "").strip()

    match = re.match(r"^[\d]+-[\d]+(?:-[\d]+)*", cleaned)
    if match and match.group(0) in FORMATION_LAYOUTS:
        return match.group(0)

    return None


def formation_rows(formation: str) -> list[list[tuple[int, str]]]:
    """Return the formation as rows of (slot_index, category) pairs."""
    layout = FORMATION_LAYOUTS[formation]
    rows = []
    slot_index = 0
    for count, category in layout:
        row = []
        for _ in range(count):
            row.append((slot_index, category))
            slot_index += 1
        rows.append(row)
    return rows


def slot_categories(formation: str) -> list[str]:
    """Flat list of categories indexed by slot."""
    return [category for row in formation_rows(formation) for _, category in row]


def slot_category(formation: str, slot_index: int) -> str:
    return slot_categories(formation)[slot_index]


def _normalize(value: str) -> str:
    value = value.lower().strip()
    value = re.sub(r"[-_/()]+", " ", value)
    value = re.sub(r"\s+", " ", value)
    return value


def infer_position_category(position: str | None) -> str | None:
    """
    Best-effort mapping of a free-text player position to a slot category.

    Returns one of: gk, def, mid, fwd, or None if unknown.
    """
    if not position:
        return None

    normalized = _normalize(position)
    tokens = set(normalized.split())

    if tokens & {"gk", "g", "goalkeeper", "keeper"}:
        return GOALKEEPER

    # MID before DEF so "cdm" / "halfback" are not read as defenders
    if tokens & {"mid", "mf", "midfielder", "cm", "cdm", "cam", "dm", "am", "lm", "rm", "halfback"}:
        return MIDFIELDER

    if tokens & {"def", "df", "defender", "cb", "lb", "rb", "lwb", "rwb", "fullback", "back"}:
        return DEFENDER

    if tokens & {"fwd", "fw", "forward", "st", "cf", "lw", "rw", "striker", "winger", "attacker"}:
        return FORWARD

    return None
