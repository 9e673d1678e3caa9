from datetime import date, datetime, time
from typing import List, Optional

from sqlmodel import Session, select

from app.models.savings_entry import SavingsEntry


class SavingsEntryRepository:
    def __init__(self, session: Session):
        self.session = session

    def list_for_ledger(self, ledger_id: int, limit: Optional[int] = None) -> List[SavingsEntry]:
        query = (
            select(SavingsEntry)
            .where(SavingsEntry.ledger_id == ledger_id)
            .order_by(SavingsEntry.created_at.desc(), SavingsEntry.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return list(self.session.exec(query).all())

    def since(self, ledger_id: int, start: date) -> List[SavingsEntry]:
        return list(
            self.session.exec(
                select(SavingsEntry)
                .where(
                    SavingsEntry.ledger_id == ledger_id,
                    SavingsEntry.created_at >= datetime.combine(start, time.min),
                )
                .order_by(SavingsEntry.created_at, SavingsEntry.id)
            ).all()
        )

    def add(self, entry: SavingsEntry) -> SavingsEntry:
        self.session.add(entry)
        self.session.flush()
        return entry
