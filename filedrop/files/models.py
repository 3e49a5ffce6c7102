from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column
from filedrop.shared.db import Base
import uuid

def _id32() -> str:
    return uuid.uuid4().hex

class FileRecord(Base):
    __tablename__ = "file_records"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id32)
    # name on disk, <stamp>-<original name>
    filename: Mapped[str] = mapped_column(String(255))
    index: Mapped[int] = mapped_column(Integer, index=True)
    upload_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

class Counter(Base):
    """Named high-water marks; `file_index` hands out FileRecord.index values."""
    __tablename__ = "counters"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, default=0)
