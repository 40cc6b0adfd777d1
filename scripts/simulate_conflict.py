"""Walk through a deterministic winner conflict and its resolution.

Every draw uses a random value of ``0.0`` so the first ticket in each pool
wins. Alice wins the bicycle, then wins the camera as well, which pauses the
draw until an administrator decides which prize she keeps.
"""

from __future__ import annotations

import argparse
import logging

from cauction.draw import (
    AuctionDrawEngine,
    AuctionState,
    DrawSingle,
    FixedRandomSource,
    Participant,
    Prize,
    PrizeEntry,
    ResolveConflict,
    Transition,
)


def _initial_state() -> AuctionState:
    return AuctionState(
        prizes=(
            Prize(
                id="bicycle",
                name="Bicycle",
                entries=(PrizeEntry("alice", 3), PrizeEntry("bob", 1)),
            ),
            Prize(
                id="camera",
                name="Camera",
                entries=(PrizeEntry("alice", 3), PrizeEntry("carol", 2)),
            ),
        ),
        participants={
            "alice": Participant("alice", "Alice", initial_tickets=6),
            "bob": Participant("bob", "Bob", initial_tickets=1),
            "carol": Participant("carol", "Carol", initial_tickets=2),
        },
    )


def _show(step: str, transition: Transition) -> None:
    state = transition.state
    print(f"== {step}: {transition.kind.value}")
    print(f"   {transition.outcome.message}")
    for prize in state.prizes:
        names = [state.participant_name(pid) for pid in state.winners_of(prize.id)]
        print(f"   {prize.name}: {', '.join(names) or '-'}")
    if state.pending_conflict is not None:
        print(f"   pending conflict: {state.pending_conflict.id}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--keep-new",
        action="store_true",
        help="let Alice keep the camera instead of the bicycle",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="show engine logs")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s [%(name)s] %(message)s",
    )

    engine = AuctionDrawEngine(FixedRandomSource(0.0))
    state = _initial_state()

    first = engine.apply(state, DrawSingle("bicycle"), is_admin=True)
    _show("draw bicycle", first)

    second = engine.apply(first.state, DrawSingle("camera"), is_admin=True)
    _show("draw camera", second)

    conflict = second.state.pending_conflict
    if conflict is None:
        return
    if args.keep_new:
        keep, drop = conflict.new_prize_id, conflict.existing_prize_id
    else:
        keep, drop = conflict.existing_prize_id, conflict.new_prize_id

    resolved = engine.apply(
        second.state,
        ResolveConflict(
            conflict_id=conflict.id,
            keep_prize_id=keep,
            drop_prize_id=drop,
            participant_id=conflict.participant_id,
        ),
        is_admin=True,
    )
    _show("resolve", resolved)


if __name__ == "__main__":
    main()
