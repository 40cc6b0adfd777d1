from cauction.db.engine import get_sessionmaker, make_engine
from cauction.models import (
    AuctionSettings,
    Base,
    Participant,
    Prize,
    PrizeEntry,
    PrizeTier,
)


def main() -> None:
    """Seed the development database with a sample roster and prize catalog."""
    engine = make_engine()

    # Drop and recreate all tables. Foreign keys are switched off during the
    # DROP so SQLite does not trip over the entry and winner references.
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        Base.metadata.drop_all(bind=conn)
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)

    with Session.begin() as session:
        # Roster
        participants = [
            Participant(id="ADMIN001", name="Event Admin", facility_name="Head Office", initial_tickets=0),
            Participant(id="E1001", name="Aiko Tanaka", facility_name="Sendai", initial_tickets=10),
            Participant(id="E1002", name="Ben Carter", facility_name="Sendai", initial_tickets=10),
            Participant(id="E1003", name="Chiho Sato", facility_name="Tokyo", initial_tickets=8),
            Participant(id="E1004", name="Daniel Ito", facility_name="Tokyo", initial_tickets=8),
            Participant(
                id="E1005",
                name="Emi Kobayashi",
                facility_name="Osaka",
                initial_tickets=5,
                status="at_party",
            ),
            Participant(
                id="E1006",
                name="Fumio Yamada",
                facility_name="Osaka",
                initial_tickets=5,
                status="inactive",
            ),
        ]
        session.add_all(participants)

        # Tiers
        grand = PrizeTier(id="grand", name="Grand Prizes", display_order=1, color="#d4af37")
        standard = PrizeTier(id="standard", name="Standard Prizes", display_order=2, color="#8a8a8a")
        session.add_all([grand, standard])
        session.flush()

        # Catalog
        bicycle = Prize(
            id="bicycle",
            name="Electric Bicycle",
            description="Folding e-bike with a 60 km range.",
            tier_id=grand.id,
        )
        getaway = Prize(
            id="onsen",
            name="Onsen Weekend",
            description="Two nights for two at a hot spring inn.",
            tier_id=grand.id,
        )
        headphones = Prize(
            id="headphones",
            name="Noise Cancelling Headphones",
            tier_id=standard.id,
            number_of_winners=2,
        )
        vouchers = Prize(
            id="vouchers",
            name="Restaurant Vouchers",
            tier_id=standard.id,
            number_of_winners=3,
        )
        session.add_all([bicycle, getaway, headphones, vouchers])
        session.flush()

        # Ticket allocations (within each participant's budget)
        allocations = {
            "E1001": {"bicycle": 6, "headphones": 4},
            "E1002": {"bicycle": 3, "onsen": 5, "vouchers": 2},
            "E1003": {"onsen": 4, "headphones": 4},
            "E1004": {"bicycle": 2, "vouchers": 6},
            "E1005": {"headphones": 2, "vouchers": 3},
        }
        prizes = {p.id: p for p in (bicycle, getaway, headphones, vouchers)}
        for participant_id, per_prize in allocations.items():
            for prize_id, count in per_prize.items():
                prizes[prize_id].entries.append(
                    PrizeEntry(participant_id=participant_id, ticket_count=count)
                )

        AuctionSettings.get_or_create(session)

    print("Development database seeded.")


if __name__ == "__main__":
    main()
