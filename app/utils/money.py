from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

CENT = Decimal("0.01")

Number = Union[Decimal, int, str]


def to_money(value: Number) -> Decimal:
    # float no entra: str(float) ya arrastra el error binario
    if isinstance(value, float):
        raise TypeError("Usa Decimal o str para montos, no float.")
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values: Iterable[Number]) -> Decimal:
    return to_money(sum((Decimal(v) for v in values), Decimal("0")))
