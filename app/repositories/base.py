from typing import Optional

from sqlmodel import col


def match_account(column, account_id: Optional[int]):
    # None es la bolsa "sin cuenta": se compara con IS NULL, nunca con "="
    if account_id is None:
        return col(column).is_(None)
    return column == account_id
