"""
Tournament Bracket Engine

Builds single-elimination brackets from a seeded team list and advances
winners through them.

The bracket is an arena of BracketNode objects keyed by id. Every node
knows its parent and which slot of the parent its winner goes to; both
are fixed when the tree is built. Nodes also know their two feeders,
which is how a permanently empty slot is told apart from a slot that is
only waiting for a result.

Byes:
    A round-1 slot with no team is permanently empty. A match with one
    team and one permanently empty slot is a bye and resolves at once.
    A match whose two slots are both permanently empty is void: it is
    complete with no winner, and any slot it feeds is permanently empty
    too. Resolution repeats until nothing changes, so chains of byes
    across several rounds settle in one call.

Usage:
    tree = BracketTree.build([4, 9, 2, 7, 5])
    tree.advance(node_id=1, winner_team_id=4)
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from exceptions import (
    InsufficientTeams,
    InvalidWinner,
    MatchAlreadyDecided,
    MatchNotFound,
    MatchNotReady,
    ValidationError,
)
from models.bracket import BracketSlot


FINAL = "Final"
SEMI_FINALS = "Semi Finals"
QUARTER_FINALS = "Quarter Finals"


def round_count(team_count: int) -> int:
    """Number of rounds needed: ceil(log2(team_count))."""
    if team_count < 2:
        raise InsufficientTeams(f"Need at least 2 teams to generate a bracket, got {team_count}")
    return (team_count - 1).bit_length()


def round_name(rounds_from_final: int, matches_in_round: int) -> str:
    """
    Descriptive name for a round.

    Args:
        rounds_from_final: 0 for the final, 1 for the round before it, ...
        matches_in_round: Number of matches in the round
    """
    if rounds_from_final == 0:
        return FINAL
    if rounds_from_final == 1:
        return SEMI_FINALS
    if rounds_from_final == 2:
        return QUARTER_FINALS
    return f"Round of {matches_in_round * 2}"


@dataclass
class BracketNode:
    """A match in the bracket arena."""
    node_id: int
    round_number: int
    position: int  # 0-indexed within the round
    match_number: int  # 1-indexed across the whole bracket
    round_name: str
    home_team_id: Optional[int] = None
    away_team_id: Optional[int] = None
    winner_team_id: Optional[int] = None
    is_complete: bool = False
    is_bye: bool = False
    parent_id: Optional[int] = None
    parent_slot: Optional[BracketSlot] = None
    home_feeder_id: Optional[int] = None
    away_feeder_id: Optional[int] = None

    @property
    def is_void(self) -> bool:
        return self.is_complete and self.winner_team_id is None

    @property
    def loser_team_id(self) -> Optional[int]:
        if not self.is_complete or self.is_bye or self.winner_team_id is None:
            return None
        if self.winner_team_id == self.home_team_id:
            return self.away_team_id
        return self.home_team_id

    def team_in(self, slot: BracketSlot) -> Optional[int]:
        return self.home_team_id if slot == BracketSlot.HOME else self.away_team_id

    def set_team(self, slot: BracketSlot, team_id: Optional[int]) -> None:
        if slot == BracketSlot.HOME:
            self.home_team_id = team_id
        else:
            self.away_team_id = team_id

    def feeder_in(self, slot: BracketSlot) -> Optional[int]:
        return self.home_feeder_id if slot == BracketSlot.HOME else self.away_feeder_id


@dataclass
class AdvanceResult:
    """Outcome of recording a winner."""
    node: BracketNode
    loser_team_id: Optional[int] = None
    changed: bool = True
    # Nodes resolved or filled as a knock-on effect (transitive byes)
    auto_advanced: list[BracketNode] = field(default_factory=list)


class BracketTree:
    """
    A single-elimination bracket.

    Round numbers increase towards the final; the final is the only node
    without a parent.
    """

    def __init__(self, nodes: Iterable[BracketNode]):
        self.nodes: dict[int, BracketNode] = {n.node_id: n for n in nodes}

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def build(cls, team_ids: Sequence[int]) -> "BracketTree":
        """
        Build a bracket from team ids ordered by seed.

        Round 1 match i takes team_ids[2i] and team_ids[2i + 1]; missing
        entries are byes.

        Raises:
            InsufficientTeams: fewer than 2 teams
            ValidationError: a team appears twice
        """
        team_ids = list(team_ids)
        rounds = round_count(len(team_ids))
        if len(set(team_ids)) != len(team_ids):
            raise ValidationError("A team cannot appear twice in a bracket")

        bracket_size = 2 ** rounds
        nodes: list[BracketNode] = []
        by_round: dict[int, list[BracketNode]] = {}
        next_id = 1

        for round_number in range(1, rounds + 1):
            matches_in_round = bracket_size // (2 ** round_number)
            name = round_name(rounds - round_number, matches_in_round)
            by_round[round_number] = []

            for position in range(matches_in_round):
                node = BracketNode(
                    node_id=next_id,
                    round_number=round_number,
                    position=position,
                    match_number=next_id,
                    round_name=name,
                )
                if round_number == 1:
                    home_index, away_index = position * 2, position * 2 + 1
                    node.home_team_id = team_ids[home_index] if home_index < len(team_ids) else None
                    node.away_team_id = team_ids[away_index] if away_index < len(team_ids) else None

                nodes.append(node)
                by_round[round_number].append(node)
                next_id += 1

        # Match i of round r feeds match i // 2 of round r + 1
        for round_number in range(2, rounds + 1):
            previous = by_round[round_number - 1]
            for position, parent in enumerate(by_round[round_number]):
                home_child = previous[position * 2]
                away_child = previous[position * 2 + 1]

                home_child.parent_id = parent.node_id
                home_child.parent_slot = BracketSlot.HOME
                parent.home_feeder_id = home_child.node_id

                away_child.parent_id = parent.node_id
                away_child.parent_slot = BracketSlot.AWAY
                parent.away_feeder_id = away_child.node_id

        tree = cls(nodes)
        tree.propagate_byes()
        return tree

    @classmethod
    def from_matches(cls, matches: Iterable[Any]) -> "BracketTree":
        """
        Rebuild the arena from stored match rows.

        Rows need the BracketMatch attributes; feeders are derived from
        each row's ``next_bracket_id`` and ``next_slot``.
        """
        nodes = [
            BracketNode(
                node_id=m.id,
                round_number=m.round_number,
                position=0,
                match_number=m.match_number,
                round_name=m.round_name,
                home_team_id=m.home_team_id,
                away_team_id=m.away_team_id,
                winner_team_id=m.winner_team_id,
                is_complete=m.is_completed,
                is_bye=m.is_bye,
                parent_id=m.next_bracket_id,
                parent_slot=m.next_slot,
            )
            for m in matches
        ]
        tree = cls(nodes)

        for round_number, round_nodes in tree.matches_by_round().items():
            for position, node in enumerate(round_nodes):
                node.position = position

        for node in tree.nodes.values():
            if node.parent_id is None:
                continue
            parent = tree.nodes[node.parent_id]
            if node.parent_slot == BracketSlot.HOME:
                parent.home_feeder_id = node.node_id
            else:
                parent.away_feeder_id = node.node_id

        return tree

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def rounds(self) -> int:
        return max((n.round_number for n in self.nodes.values()), default=0)

    @property
    def final(self) -> Optional[BracketNode]:
        roots = [n for n in self.nodes.values() if n.parent_id is None]
        return roots[0] if len(roots) == 1 else None

    def ordered(self) -> list[BracketNode]:
        """All nodes, round by round, in match-number order."""
        return sorted(self.nodes.values(), key=lambda n: (n.round_number, n.match_number))

    def matches_by_round(self) -> dict[int, list[BracketNode]]:
        grouped: dict[int, list[BracketNode]] = {}
        for node in self.ordered():
            grouped.setdefault(node.round_number, []).append(node)
        return grouped

    def byes(self) -> list[BracketNode]:
        return [n for n in self.ordered() if n.is_bye]

    def voids(self) -> list[BracketNode]:
        return [n for n in self.ordered() if n.is_void]

    def decisive_matches(self) -> list[BracketNode]:
        """
        Matches that are (or will be) played between two teams.

        A match still waiting on one feeder while its other slot is
        permanently empty is a bye in the making and is not counted.
        """
        return [
            n for n in self.ordered()
            if not n.is_bye and not n.is_void
            and not self._slot_is_dead(n, BracketSlot.HOME)
            and not self._slot_is_dead(n, BracketSlot.AWAY)
        ]

    def snapshot(self) -> tuple:
        """Comparable view of the bracket state."""
        return tuple(
            (n.node_id, n.home_team_id, n.away_team_id, n.winner_team_id,
             n.is_complete, n.is_bye)
            for n in self.ordered()
        )

    # -------------------------------------------------------------------------
    # Bye propagation
    # -------------------------------------------------------------------------

    def _slot_is_dead(self, node: BracketNode, slot: BracketSlot) -> bool:
        """True if the slot is empty and can never be filled."""
        if node.team_in(slot) is not None:
            return False
        feeder_id = node.feeder_in(slot)
        if feeder_id is None:
            # Only round-1 slots have no feeder
            return True
        return self.nodes[feeder_id].is_void

    def propagate_byes(self) -> list[BracketNode]:
        """
        Resolve byes and carry winners forward until nothing changes.

        Safe to call any number of times; a second call on a settled
        bracket changes nothing.

        Returns:
            Nodes that were resolved or received a team
        """
        touched: list[BracketNode] = []

        while True:
            progressed = False

            for node in self.ordered():
                if not node.is_complete:
                    home_dead = self._slot_is_dead(node, BracketSlot.HOME)
                    away_dead = self._slot_is_dead(node, BracketSlot.AWAY)

                    if home_dead and away_dead:
                        node.is_complete = True
                        progressed = True
                        touched.append(node)
                    elif home_dead and node.away_team_id is not None:
                        node.winner_team_id = node.away_team_id
                        node.is_complete = True
                        node.is_bye = True
                        progressed = True
                        touched.append(node)
                    elif away_dead and node.home_team_id is not None:
                        node.winner_team_id = node.home_team_id
                        node.is_complete = True
                        node.is_bye = True
                        progressed = True
                        touched.append(node)

                if node.is_complete and node.winner_team_id is not None and node.parent_id is not None:
                    parent = self.nodes[node.parent_id]
                    if parent.team_in(node.parent_slot) is None:
                        parent.set_team(node.parent_slot, node.winner_team_id)
                        progressed = True
                        touched.append(parent)

            if not progressed:
                return touched

    # -------------------------------------------------------------------------
    # Advancement
    # -------------------------------------------------------------------------

    def advance(self, node_id: int, winner_team_id: Optional[int]) -> AdvanceResult:
        """
        Record the winner of a match and carry them forward.

        Re-submitting the recorded winner is a no-op.

        Raises:
            MatchNotFound: unknown node id
            InvalidWinner: winner is not one of the two teams
            MatchAlreadyDecided: the match already has a different winner
            MatchNotReady: one of the slots is still waiting for a team
        """
        node = self.nodes.get(node_id)
        if node is None:
            raise MatchNotFound(f"Bracket match not found: {node_id}")

        if winner_team_id is None or winner_team_id not in (node.home_team_id, node.away_team_id):
            raise InvalidWinner(
                f"Team {winner_team_id} is not playing in match {node.match_number}"
            )

        if node.is_complete:
            if winner_team_id == node.winner_team_id:
                return AdvanceResult(node=node, changed=False)
            raise MatchAlreadyDecided(
                f"Match {node.match_number} was already won by team {node.winner_team_id}"
            )

        if node.home_team_id is None or node.away_team_id is None:
            raise MatchNotReady(f"Match {node.match_number} is still waiting for an opponent")

        node.winner_team_id = winner_team_id
        node.is_complete = True

        auto_advanced = self.propagate_byes()
        return AdvanceResult(
            node=node,
            loser_team_id=node.loser_team_id,
            changed=True,
            auto_advanced=auto_advanced,
        )
