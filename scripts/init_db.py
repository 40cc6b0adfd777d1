from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from cauction.db.engine import get_sessionmaker, make_engine
from cauction.models import AuctionSettings, Base


def upgrade_db(target_revision: str = "head") -> None:
    """Apply Alembic migrations up to the requested revision."""
    project_root = Path(__file__).resolve().parents[1]
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    command.upgrade(alembic_cfg, target_revision)


def report_schema() -> int:
    """Print the auction tables and flag any the models expect but are missing."""
    engine = make_engine()
    present = set(inspect(engine).get_table_names())
    expected = set(Base.metadata.tables)
    print("Current tables:", ", ".join(sorted(present)))
    missing = sorted(expected - present)
    if missing:
        print("Missing auction tables:", ", ".join(missing))
        return 1

    Session = get_sessionmaker(engine)
    with Session.begin() as session:
        settings = AuctionSettings.get_or_create(session)
        state = "open" if settings.is_auction_open else "closed"
        print(f"Auction is {state}; draws paused: {settings.draws_paused}")
    return 0


def main() -> int:
    """Migrate the auction database to head and report the resulting schema."""
    upgrade_db()
    return report_schema()


if __name__ == "__main__":
    raise SystemExit(main())
