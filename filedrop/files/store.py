from typing import Iterable, List, Sequence, Tuple
from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from filedrop.files.models import FileRecord, Counter

FILE_INDEX = "file_index"

class FileRecordStore:
    """
    Metadata store for File Records, bound to one session.

    The `file_index` counter tracks count(): uploads advance it, deletes pull it
    back, each in the same transaction as the rows they touch.

    Writes are committed by `insert_many` and `delete_by_id`; `reserve_indices`
    leaves its transaction open so the reserved range and the inserted rows
    commit together.
    """

    def __init__(self, db: Session):
        self.db = db

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(FileRecord)) or 0

    def _seed_counter(self) -> None:
        self.db.add(Counter(name=FILE_INDEX, value=self.count()))
        try:
            self.db.flush()
        except IntegrityError:
            # seeded concurrently by another writer
            self.db.rollback()

    def reserve_indices(self, n: int) -> List[int]:
        """Atomically advance the file index counter by n and return the n reserved values."""
        if n <= 0:
            return []
        bump = (
            update(Counter)
            .where(Counter.name == FILE_INDEX)
            .values(value=Counter.value + n)
            .execution_options(synchronize_session=False)
        )
        if self.db.execute(bump).rowcount == 0:
            self._seed_counter()
            self.db.execute(bump)
        top = self.db.scalar(select(Counter.value).where(Counter.name == FILE_INDEX))
        return list(range(top - n + 1, top + 1))

    def insert_many(self, rows: Iterable[Tuple[str, int]]) -> List[FileRecord]:
        """Insert (filename, index) pairs as one batch."""
        recs = [FileRecord(filename=filename, index=index) for filename, index in rows]
        try:
            self.db.add_all(recs)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return recs

    def find_all(self) -> Sequence:
        stmt = select(
            FileRecord.id, FileRecord.filename, FileRecord.index, FileRecord.upload_date
        ).order_by(FileRecord.index, FileRecord.upload_date)
        return self.db.execute(stmt).all()

    def find_by_id(self, file_id: str) -> FileRecord | None:
        return self.db.get(FileRecord, file_id)

    def delete_by_id(self, file_id: str) -> bool:
        try:
            res = self.db.execute(delete(FileRecord).where(FileRecord.id == file_id))
            if res.rowcount:
                # keep the counter equal to count() so the next upload continues from it
                self.db.execute(
                    update(Counter)
                    .where(Counter.name == FILE_INDEX)
                    .values(value=Counter.value - res.rowcount)
                    .execution_options(synchronize_session=False)
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return res.rowcount > 0
