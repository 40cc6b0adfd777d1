import unittest

from sqlalchemy import create_engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from cauction.models import (
    AuctionSettings,
    Base,
    Participant,
    Prize,
    PrizeEntry,
    PrizeTier,
    PrizeWinner,
)


class DBTestCase(unittest.TestCase):
    def setUp(self):
        # In-memory SQLite for isolation
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(
            bind=self.engine, future=True, expire_on_commit=False
        )

    def tearDown(self):
        self.engine.dispose()


class ParticipantModelTests(DBTestCase):
    def test_name_is_stripped(self):
        with self.Session.begin() as session:
            session.add(Participant(id="E001", name="  Hanako  ", initial_tickets=5))

        with self.Session() as session:
            participant = Participant.get_by_id(session, "E001")
            self.assertIsNotNone(participant)
            self.assertEqual(participant.name, "Hanako")
            self.assertEqual(participant.status, "working")

    def test_blank_name_is_rejected(self):
        with self.assertRaises(ValueError):
            Participant(id="E002", name="   ")

    def test_unknown_status_violates_check_constraint(self):
        with self.assertRaises(IntegrityError):
            with self.Session.begin() as session:
                session.add(Participant(id="E003", name="Taro", status="retired"))


class PrizeModelTests(DBTestCase):
    def setUp(self):
        super().setUp()
        with self.Session.begin() as session:
            session.add_all(
                [
                    Participant(id="A", name="Alice", initial_tickets=10),
                    Participant(id="B", name="Bob", initial_tickets=10),
                    PrizeTier(id="silver", name="Silver", display_order=2),
                    PrizeTier(id="gold", name="Gold", display_order=1),
                ]
            )
            prize = Prize(id="P1", name="Bicycle", tier_id="gold", number_of_winners=2)
            prize.entries.append(PrizeEntry(participant_id="A", ticket_count=3))
            prize.entries.append(PrizeEntry(participant_id="B", ticket_count=1))
            session.add(prize)

    def test_entries_keep_insertion_order_and_total(self):
        with self.Session() as session:
            prize = Prize.get_by_id(session, "P1")
            self.assertEqual([e.participant_id for e in prize.entries], ["A", "B"])
            self.assertEqual(prize.total_tickets, 4)
            self.assertEqual(prize.tier.name, "Gold")

    def test_tiers_are_ordered_by_display_order(self):
        with self.Session() as session:
            self.assertEqual([t.id for t in PrizeTier.ordered(session)], ["gold", "silver"])

    def test_duplicate_entry_is_rejected(self):
        with self.assertRaises(IntegrityError):
            with self.Session.begin() as session:
                session.add(PrizeEntry(prize_id="P1", participant_id="A", ticket_count=1))

    def test_zero_ticket_entry_is_rejected(self):
        with self.assertRaises(IntegrityError):
            with self.Session.begin() as session:
                session.add(Participant(id="C", name="Carol"))
                session.add(PrizeEntry(prize_id="P1", participant_id="C", ticket_count=0))

    def test_winners_are_ordered_by_position(self):
        with self.Session.begin() as session:
            prize = Prize.get_by_id(session, "P1")
            prize.winners.append(PrizeWinner(participant_id="B", position=1))
            prize.winners.append(PrizeWinner(participant_id="A", position=0))

        with self.Session() as session:
            prize = Prize.get_by_id(session, "P1")
            self.assertEqual([w.participant_id for w in prize.winners], ["A", "B"])
            self.assertIsNotNone(prize.winners[0].drawn_at)

    def test_deleting_prize_removes_entries(self):
        with self.Session.begin() as session:
            session.delete(Prize.get_by_id(session, "P1"))

        with self.Session() as session:
            self.assertEqual(session.scalars(select(PrizeEntry)).all(), [])


class AuctionSettingsTests(DBTestCase):
    def test_get_or_create_returns_single_row(self):
        with self.Session.begin() as session:
            first = AuctionSettings.get_or_create(session)
            second = AuctionSettings.get_or_create(session)
            self.assertIs(first, second)
            self.assertTrue(first.is_auction_open)
            self.assertFalse(first.draws_paused)

        with self.Session() as session:
            self.assertEqual(len(session.scalars(select(AuctionSettings)).all()), 1)

    def test_clear_conflict(self):
        with self.Session.begin() as session:
            settings = AuctionSettings.get_or_create(session)
            settings.conflict_id = "conflict-abc"
            settings.conflict_participant_id = "A"
            settings.conflict_existing_prize_id = "P1"
            settings.conflict_new_prize_id = "P2"
            self.assertTrue(settings.draws_paused)
            settings.clear_conflict()
            self.assertFalse(settings.draws_paused)
            self.assertIsNone(settings.conflict_new_prize_id)


if __name__ == "__main__":
    unittest.main()
