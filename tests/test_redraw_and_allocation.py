from __future__ import annotations

import unittest

from cauction.draw import (
    AllocateTickets,
    AuctionDrawEngine,
    AuctionState,
    Conflict,
    FixedRandomSource,
    OutcomeKind,
    Participant,
    Prize,
    PrizeEntry,
    RedrawPrize,
    ResetAuction,
    allocated_tickets,
    remaining_tickets,
)


def _prize(prize_id: str, *entries: tuple[str, int], number_of_winners: int = 1) -> Prize:
    return Prize(
        id=prize_id,
        name=f"Prize {prize_id}",
        entries=tuple(PrizeEntry(pid, count) for pid, count in entries),
        number_of_winners=number_of_winners,
    )


def _participants(budget: int, *ids: str) -> dict[str, Participant]:
    return {pid: Participant(id=pid, name=f"Person {pid}", initial_tickets=budget) for pid in ids}


class RedrawPrizeTests(unittest.TestCase):
    def _closed(self, *prizes: Prize, winners: dict | None = None) -> AuctionState:
        return AuctionState(
            prizes=prizes,
            participants=_participants(10, "A", "B", "C", "D"),
            winners=winners or {},
            is_auction_open=False,
        )

    def test_scenario_c_zero_ticket_entries_report_no_entries(self) -> None:
        state = self._closed(_prize("P1", ("A", 0)))
        transition = AuctionDrawEngine(FixedRandomSource(0.0)).apply(
            state, RedrawPrize("P1"), is_admin=True
        )
        self.assertEqual(transition.kind, OutcomeKind.NO_ENTRIES)
        self.assertIs(transition.state, state)

    def test_redraw_requires_closed_auction(self) -> None:
        state = AuctionState(
            prizes=(_prize("P1", ("A", 1)),),
            participants=_participants(10, "A"),
        )
        transition = AuctionDrawEngine(FixedRandomSource(0.0)).apply(
            state, RedrawPrize("P1"), is_admin=True
        )
        self.assertEqual(transition.kind, OutcomeKind.AUCTION_STILL_OPEN)
        self.assertIs(transition.state, state)

    def test_unknown_prize_is_not_found(self) -> None:
        state = self._closed(_prize("P1", ("A", 1)))
        transition = AuctionDrawEngine(FixedRandomSource(0.0)).apply(
            state, RedrawPrize("P9"), is_admin=True
        )
        self.assertEqual(transition.kind, OutcomeKind.NOT_FOUND)

    def test_redraw_replaces_the_whole_winner_list(self) -> None:
        state = self._closed(
            _prize("P1", ("A", 3), ("B", 1), ("C", 1), number_of_winners=2),
            _prize("P2", ("B", 1), ("D", 1)),
            winners={"P1": ("A", "C"), "P2": ("B",)},
        )
        # 0.9 picks the last ticket of [A, A, A, C], then the last of [A, A, A].
        transition = AuctionDrawEngine(FixedRandomSource(0.9)).apply(
            state, RedrawPrize("P1"), is_admin=True
        )
        self.assertEqual(transition.kind, OutcomeKind.WINNER_REDRAWN)
        self.assertEqual(transition.state.winners_of("P1"), ("C", "A"))
        self.assertEqual(transition.state.winners_of("P2"), ("B",))
        self.assertEqual(transition.outcome.winner_count, 2)
        self.assertFalse(transition.state.is_auction_open)

    def test_redraw_may_leave_fewer_winners_than_quota(self) -> None:
        state = self._closed(
            _prize("P1", ("A", 1), ("B", 1), number_of_winners=3),
            _prize("P2", ("B", 1)),
            winners={"P2": ("B",)},
        )
        transition = AuctionDrawEngine(FixedRandomSource(0.0)).apply(
            state, RedrawPrize("P1"), is_admin=True
        )
        self.assertEqual(transition.kind, OutcomeKind.WINNER_REDRAWN)
        self.assertEqual(transition.state.winners_of("P1"), ("A",))
        self.assertEqual(transition.outcome.winner_count, 1)
        self.assertEqual(transition.outcome.message, "Prize P1 now has 1 winners: Person A.")

    def test_redraw_with_nobody_eligible_clears_the_prize(self) -> None:
        state = self._closed(
            _prize("P1", ("B", 2)),
            _prize("P2", ("B", 1)),
            winners={"P1": ("B",), "P2": ("B",)},
        )
        transition = AuctionDrawEngine(FixedRandomSource(0.0)).apply(
            state, RedrawPrize("P1"), is_admin=True
        )
        self.assertEqual(transition.kind, OutcomeKind.WINNER_REDRAWN)
        self.assertEqual(transition.outcome.winner_count, 0)
        self.assertNotIn("P1", transition.state.winners)


class AllocationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = AuctionDrawEngine(FixedRandomSource(0.0))
        self.state = AuctionState(
            prizes=(_prize("P1", ("B", 1)), _prize("P2")),
            participants=_participants(5, "A", "B"),
        )

    def _allocate(self, state: AuctionState, participant: str, prize: str, count: int):
        return self.engine.apply(
            state, AllocateTickets(participant, prize, count), is_admin=False
        )

    def test_allocation_within_budget(self) -> None:
        transition = self._allocate(self.state, "A", "P1", 3)
        self.assertEqual(transition.kind, OutcomeKind.TICKETS_ALLOCATED)
        self.assertEqual(transition.state.prize("P1").tickets_for("A"), 3)
        self.assertEqual(remaining_tickets(transition.state, "A"), 2)
        self.assertEqual(allocated_tickets(transition.state, "A"), 3)

    def test_allocation_over_budget_is_refused(self) -> None:
        state = self._allocate(self.state, "A", "P1", 3).state
        transition = self._allocate(state, "A", "P2", 3)
        self.assertEqual(transition.kind, OutcomeKind.INSUFFICIENT_TICKETS)
        self.assertIs(transition.state, state)

    def test_reallocation_replaces_count_and_moves_entry_last(self) -> None:
        state = self._allocate(self.state, "B", "P1", 2).state
        state = self._allocate(state, "A", "P1", 3).state
        state = self._allocate(state, "A", "P1", 5).state
        entries = state.prize("P1").entries
        self.assertEqual([(e.participant_id, e.ticket_count) for e in entries], [("B", 2), ("A", 5)])

        state = self._allocate(state, "B", "P1", 1).state
        entries = state.prize("P1").entries
        self.assertEqual([(e.participant_id, e.ticket_count) for e in entries], [("A", 5), ("B", 1)])

    def test_zero_count_removes_the_entry(self) -> None:
        transition = self._allocate(self.state, "B", "P1", 0)
        self.assertEqual(transition.kind, OutcomeKind.TICKETS_ALLOCATED)
        self.assertEqual(transition.state.prize("P1").entries, ())

    def test_negative_count_is_invalid(self) -> None:
        transition = self._allocate(self.state, "A", "P1", -1)
        self.assertEqual(transition.kind, OutcomeKind.INVALID_ALLOCATION)
        self.assertIs(transition.state, self.state)

    def test_unknown_prize_or_participant_is_not_found(self) -> None:
        self.assertEqual(self._allocate(self.state, "Z", "P1", 1).kind, OutcomeKind.NOT_FOUND)
        self.assertEqual(self._allocate(self.state, "A", "P9", 1).kind, OutcomeKind.NOT_FOUND)

    def test_closed_auction_refuses_allocation(self) -> None:
        closed = AuctionState(
            prizes=self.state.prizes,
            participants=self.state.participants,
            is_auction_open=False,
        )
        transition = self._allocate(closed, "A", "P1", 1)
        self.assertEqual(transition.kind, OutcomeKind.AUCTION_CLOSED)
        self.assertIs(transition.state, closed)

    def test_remaining_tickets_for_unknown_participant_is_zero(self) -> None:
        self.assertEqual(remaining_tickets(self.state, "nobody"), 0)


class ResetAuctionTests(unittest.TestCase):
    def test_reset_clears_entries_winners_and_conflict(self) -> None:
        state = AuctionState(
            prizes=(_prize("P1", ("A", 2)), _prize("P2", ("A", 1))),
            participants=_participants(5, "A"),
            winners={"P1": ("A",)},
            pending_conflict=Conflict("c1", "A", "P1", "P2"),
            is_auction_open=False,
        )
        transition = AuctionDrawEngine(FixedRandomSource(0.0)).apply(
            state, ResetAuction(), is_admin=True
        )
        self.assertEqual(transition.kind, OutcomeKind.AUCTION_RESET)
        self.assertEqual(dict(transition.state.winners), {})
        self.assertIsNone(transition.state.pending_conflict)
        self.assertTrue(transition.state.is_auction_open)
        self.assertTrue(all(not p.entries for p in transition.state.prizes))
        self.assertEqual(len(transition.state.prizes), 2)


if __name__ == "__main__":
    unittest.main()
