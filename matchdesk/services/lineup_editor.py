"""
Tactical board: two starting formations plus bench lists for one match.

Each team side ("A" = team_a, "B" = team_b) holds a formation code, a
starting map ``slot_index -> player_id`` and a bench list. A player is in
exactly one starting slot, on the bench once, or absent. Every editing
operation either applies fully or raises ``ValidationError`` leaving the
board untouched. ``commit`` persists both sides as a single lineup-set call.
"""

import logging
from dataclasses import dataclass, field

from matchdesk.exceptions import ValidationError
from matchdesk.repositories.base import LineupRepository
from matchdesk.schemas import (
    LineupEntry,
    LineupFormations,
    MatchResponse,
    PlayerBrief,
    SlotView,
    TeamDetail,
    TeamLineupRequest,
    TeamRoster,
)
from matchdesk.services.mutation_coordinator import MutationCoordinator
from matchdesk.services.query_cache import match_key
from matchdesk.utils.formations import (
    DEFAULT_FORMATION,
    ROSTER_GROUP_CATEGORY,
    STARTING_SLOTS,
    formation_rows,
    infer_position_category,
    normalize_formation,
    slot_category,
)

logger = logging.getLogger(__name__)


def roster_categories(roster: TeamRoster) -> dict[int, str]:
    """player_id -> slot category, from the roster partition."""
    categories: dict[int, str] = {}
    for group, category in ROSTER_GROUP_CATEGORY.items():
        for player in getattr(roster, group):
            categories[player.id] = category
    return categories


@dataclass
class TeamLineup:
    """Editable lineup of one side."""

    team_id: int
    formation: str = DEFAULT_FORMATION
    starting: dict[int, int] = field(default_factory=dict)
    bench: list[int] = field(default_factory=list)
    roster: TeamRoster | None = None

    def slot_of(self, player_id: int) -> int | None:
        for slot_index, occupant in self.starting.items():
            if occupant == player_id:
                return slot_index
        return None

    def is_assigned(self, player_id: int) -> bool:
        return self.slot_of(player_id) is not None or player_id in self.bench

    def category_of(self, player_id: int) -> str | None:
        if self.roster is None:
            return None
        category = roster_categories(self.roster).get(player_id)
        if category is not None:
            return category
        # Fall back to the free-text position when the partition is unknown
        for player in self.roster.all_players():
            if player.id == player_id:
                return infer_position_category(player.position)
        return None

    def knows_player(self, player_id: int) -> bool:
        if self.roster is None:
            return True
        return any(player.id == player_id for player in self.roster.all_players())


class LineupEditor:
    def __init__(
        self,
        team_a_id: int,
        team_b_id: int,
        *,
        coordinator: MutationCoordinator | None = None,
        repository: LineupRepository | None = None,
        roster_a: TeamRoster | None = None,
        roster_b: TeamRoster | None = None,
        enforce_positions: bool = False,
    ):
        self.coordinator = coordinator
        self.repository = repository
        self.enforce_positions = enforce_positions
        self.teams: dict[str, TeamLineup] = {
            "A": TeamLineup(team_id=team_a_id, roster=roster_a),
            "B": TeamLineup(team_id=team_b_id, roster=roster_b),
        }

    @classmethod
    def from_match(
        cls,
        match: MatchResponse,
        team_a: TeamDetail | None = None,
        team_b: TeamDetail | None = None,
        **kwargs,
    ) -> "LineupEditor":
        """Rebuild the board from a match's persisted lineup entries."""
        editor = cls(
            match.team_a_id,
            match.team_b_id,
            roster_a=team_a.roster if team_a else None,
            roster_b=team_b.roster if team_b else None,
            **kwargs,
        )
        formations = {"A": match.formation_a, "B": match.formation_b}
        for key, lineup in editor.teams.items():
            lineup.formation = normalize_formation(formations[key]) or DEFAULT_FORMATION

            entries = [e for e in match.lineups if e.team_id == lineup.team_id]
            unslotted: list[int] = []
            for entry in entries:
                if lineup.is_assigned(entry.player_id):
                    continue
                if not entry.is_starting:
                    lineup.bench.append(entry.player_id)
                elif (
                    entry.slot_index is not None
                    and 0 <= entry.slot_index < STARTING_SLOTS
                    and entry.slot_index not in lineup.starting
                ):
                    lineup.starting[entry.slot_index] = entry.player_id
                else:
                    unslotted.append(entry.player_id)

            # Older entries were stored without a slot: fill free slots in order
            free_slots = [i for i in range(STARTING_SLOTS) if i not in lineup.starting]
            for slot_index, player_id in zip(free_slots, unslotted):
                if lineup.slot_of(player_id) is None:
                    lineup.starting[slot_index] = player_id
        return editor

    def team(self, team_key: str) -> TeamLineup:
        try:
            return self.teams[team_key]
        except KeyError:
            raise ValidationError(f"Unknown team key: {team_key!r}") from None

    # ==================== Editing ====================

    def set_formation(self, team_key: str, formation: str) -> None:
        lineup = self.team(team_key)
        code = normalize_formation(formation)
        if code is None:
            raise ValidationError(code="invalid_formation")
        lineup.formation = code

    def assign_slot(self, team_key: str, slot_index: int, player_id: int) -> None:
        lineup = self.team(team_key)
        if not 0 <= slot_index < STARTING_SLOTS:
            raise ValidationError(code="invalid_slot")
        if not lineup.knows_player(player_id):
            raise ValidationError(code="player_not_in_roster")

        current_slot = lineup.slot_of(player_id)
        if current_slot == slot_index:
            return
        if current_slot is not None:
            raise ValidationError(code="player_already_starting")
        if player_id in lineup.bench:
            raise ValidationError(code="player_on_bench")

        if self.enforce_positions:
            category = lineup.category_of(player_id)
            if category is not None and category != slot_category(lineup.formation, slot_index):
                raise ValidationError(code="position_mismatch")

        lineup.starting[slot_index] = player_id

    def clear_slot(self, team_key: str, slot_index: int) -> int | None:
        """Empty a slot, returning the player who was in it."""
        lineup = self.team(team_key)
        return lineup.starting.pop(slot_index, None)

    def add_to_bench(self, team_key: str, player_id: int) -> None:
        lineup = self.team(team_key)
        if not lineup.knows_player(player_id):
            raise ValidationError(code="player_not_in_roster")
        if player_id in lineup.bench:
            return
        if lineup.slot_of(player_id) is not None:
            raise ValidationError(code="player_already_starting")
        lineup.bench.append(player_id)

    def remove_from_bench(self, team_key: str, player_id: int) -> bool:
        lineup = self.team(team_key)
        if player_id not in lineup.bench:
            return False
        lineup.bench.remove(player_id)
        return True

    def replace_team(self, team_key: str, request: TeamLineupRequest) -> None:
        """Load a whole submitted side; all-or-nothing like single edits."""
        lineup = self.team(team_key)
        saved = (lineup.formation, dict(lineup.starting), list(lineup.bench))
        lineup.starting.clear()
        lineup.bench.clear()
        try:
            self.set_formation(team_key, request.formation)
            for slot_index, player_id in sorted(request.starting.items()):
                self.assign_slot(team_key, slot_index, player_id)
            for player_id in request.bench:
                self.add_to_bench(team_key, player_id)
        except ValidationError:
            lineup.formation, lineup.starting, lineup.bench = saved
            raise

    # ==================== Views ====================

    def available_players(self, team_key: str) -> list[PlayerBrief]:
        """Roster players with no role yet. Empty when the roster is unknown."""
        lineup = self.team(team_key)
        if lineup.roster is None:
            return []
        return [p for p in lineup.roster.all_players() if not lineup.is_assigned(p.id)]

    def slots(self, team_key: str) -> list[list[SlotView]]:
        lineup = self.team(team_key)
        return [
            [
                SlotView(
                    slot_index=slot_index,
                    category=category,
                    player_id=lineup.starting.get(slot_index),
                )
                for slot_index, category in row
            ]
            for row in formation_rows(lineup.formation)
        ]

    def position_mismatches(self, team_key: str) -> list[SlotView]:
        """Occupied slots whose player plays a different category."""
        lineup = self.team(team_key)
        mismatches = []
        for row in self.slots(team_key):
            for slot in row:
                if slot.player_id is None:
                    continue
                category = lineup.category_of(slot.player_id)
                if category is not None and category != slot.category:
                    mismatches.append(slot)
        return mismatches

    def missing_starters(self, team_key: str) -> int:
        return STARTING_SLOTS - len(self.team(team_key).starting)

    def is_complete(self, team_key: str) -> bool:
        return self.missing_starters(team_key) == 0

    def formations(self) -> LineupFormations:
        return LineupFormations(
            formation_a=self.teams["A"].formation,
            formation_b=self.teams["B"].formation,
        )

    def to_entries(self, match_id: int) -> list[LineupEntry]:
        entries = []
        for lineup in self.teams.values():
            for slot_index in sorted(lineup.starting):
                entries.append(
                    LineupEntry(
                        match_id=match_id,
                        team_id=lineup.team_id,
                        player_id=lineup.starting[slot_index],
                        is_starting=True,
                        slot_index=slot_index,
                    )
                )
            for player_id in lineup.bench:
                entries.append(
                    LineupEntry(
                        match_id=match_id,
                        team_id=lineup.team_id,
                        player_id=player_id,
                        is_starting=False,
                    )
                )
        return entries

    # ==================== Persistence ====================

    async def commit(self, match_id: int) -> list[LineupEntry]:
        """Persist both sides and both formations in one lineup-set call."""
        if self.coordinator is None or self.repository is None:
            raise RuntimeError("LineupEditor.commit needs a coordinator and a lineup repository")

        entries = self.to_entries(match_id)
        formations = self.formations()

        async def operation(match: MatchResponse) -> list[LineupEntry]:
            if {match.team_a_id, match.team_b_id} != {t.team_id for t in self.teams.values()}:
                raise ValidationError(code="team_not_in_match")
            saved = await self.repository.set_lineups(match_id, entries, formations)
            logger.info(
                "Saved lineups for match %s (%s / %s, %d entries)",
                match_id, formations.formation_a, formations.formation_b, len(saved),
            )
            return saved

        return await self.coordinator.run(
            match_id,
            "lineups",
            operation,
            invalidate=(match_key(match_id),),
        )
