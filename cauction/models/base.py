from sqlalchemy.orm import DeclarativeBase
from cauction.db.metadata import metadata_obj


class Base(DeclarativeBase):
    metadata = metadata_obj
