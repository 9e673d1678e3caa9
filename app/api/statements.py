from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.core.errors import InvalidArgumentError
from app.core.security import get_current_user
from app.schemas.statement import (
    GenerationResultRead,
    MarkPaidRequest,
    PeriodRead,
    StatementCreate,
    StatementDetailRead,
    StatementLineRead,
    StatementPaymentRead,
    StatementRead,
    StatementUpdate,
)
from app.services.composition import Engine, get_engine
from app.services.periods import compute_period
from app.services.settlement import Settlement, SplitPayment
from app.services.statements import ALL_ACCOUNTS, AccountFilter, StatementView

router = APIRouter(prefix="/statements", tags=["statements"])


def account_filter(
    account_id: Optional[int] = Query(None, description="Filtra por cuenta"),
    unassigned: bool = Query(False, description="Solo los extractos sin cuenta"),
) -> AccountFilter:
    if unassigned:
        return None
    return ALL_ACCOUNTS if account_id is None else account_id


def to_detail(view: StatementView) -> StatementDetailRead:
    return StatementDetailRead(
        **StatementRead.model_validate(view.statement).model_dump(),
        lines=[StatementLineRead.model_validate(line) for line in view.lines],
    )


@router.get("/period", response_model=PeriodRead)
def preview_period(
    closing_day: int,
    due_day: int,
    year: Optional[int] = None,
    month: Optional[int] = None,
    previous_closing: Optional[date] = None,
    user_id: UUID = Depends(get_current_user),
):
    today = date.today()
    period = compute_period(closing_day, due_day, year or today.year, month or today.month, previous_closing)
    return PeriodRead.model_validate(period)


@router.post("", response_model=StatementRead)
@router.post("/", response_model=StatementRead)
def create_statement(
    statement_data: StatementCreate,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.statements.create_statement(user_id, **statement_data.model_dump())


@router.get("", response_model=List[StatementRead])
@router.get("/", response_model=List[StatementRead])
def list_statements(
    accounts: AccountFilter = Depends(account_filter),
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.statements.list_statements(user_id, accounts)


@router.get("/current", response_model=Optional[StatementRead])
def get_current_statement(
    accounts: AccountFilter = Depends(account_filter),
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.statements.get_current_statement(user_id, accounts)


@router.get("/future", response_model=List[StatementDetailRead])
def list_future_statements(
    accounts: AccountFilter = Depends(account_filter),
    months_ahead: Optional[int] = Query(None, ge=1, le=24),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    views = engine.statements.list_future_statements(
        user_id, accounts, months_ahead=months_ahead, start_date=start_date, end_date=end_date
    )
    return [to_detail(view) for view in views]


@router.post("/generate", response_model=GenerationResultRead)
def generate_future_statements(
    accounts: AccountFilter = Depends(account_filter),
    months_ahead: Optional[int] = Query(None, ge=1, le=24),
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    result = engine.statements.generate_future_statements(user_id, months_ahead, accounts)
    return GenerationResultRead.model_validate(result)


@router.get("/{statement_id}", response_model=StatementDetailRead)
def get_statement(
    statement_id: int,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return to_detail(engine.statements.get_statement(statement_id, user_id))


@router.get("/{statement_id}/payments", response_model=List[StatementPaymentRead])
def list_statement_payments(
    statement_id: int,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.settlement.payments(statement_id, user_id)


@router.patch("/{statement_id}", response_model=StatementRead)
def update_statement(
    statement_id: int,
    statement_data: StatementUpdate,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.statements.update_statement(
        statement_id, user_id, **statement_data.model_dump(exclude_unset=True)
    )


@router.delete("/{statement_id}")
def delete_statement(
    statement_id: int,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    engine.statements.delete_statement(statement_id, user_id)
    return {"message": "Extracto eliminado correctamente"}


@router.patch("/{statement_id}/mark-paid", response_model=StatementRead)
def mark_statement_paid(
    statement_id: int,
    payment: Optional[MarkPaidRequest] = None,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    settlement: Settlement = None
    if payment is not None:
        if payment.account_id is not None and payment.payments:
            raise InvalidArgumentError("Indica una cuenta o un pago dividido, no ambos.")
        if payment.payments is not None:
            settlement = [SplitPayment(p.account_id, p.amount) for p in payment.payments]
        else:
            settlement = payment.account_id
    return engine.settlement.mark_paid(statement_id, user_id, settlement)


@router.patch("/{statement_id}/mark-unpaid", response_model=StatementRead)
def mark_statement_unpaid(
    statement_id: int,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.settlement.mark_unpaid(statement_id, user_id)
