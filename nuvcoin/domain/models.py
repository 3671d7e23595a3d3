"""
Domain models for nuvcoin.

Defines the transaction record persisted by the synchronization cache and the
derived value objects produced by the aggregation engine. Field aliases are
the camelCase names used on the wire and in the durable store blob.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
    "arbitrary_types_allowed": False,
}


class TransactionKind(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Category(str, Enum):
    SALARIO = "Salário"
    FREELANCE = "Freelance"
    VENDAS = "Vendas"
    ALIMENTACAO = "Alimentação"
    TRANSPORTE = "Transporte"
    MORADIA = "Moradia"
    SAUDE = "Saúde"
    LAZER = "Lazer"
    OUTROS = "Outros"


class PaymentMethod(str, Enum):
    PIX = "pix"
    DEBIT = "debit"
    CASH = "cash"
    CREDIT = "credit"


class TransactionStatus(str, Enum):
    """Recorded on every entry; aggregation does not filter on it yet."""

    PAID = "paid"
    PENDING = "pending"


class TrendDirection(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    FLAT = "FLAT"


class TransactionRecord(BaseModel):
    """
    A single income or expense entry.

    The amount is always non-negative; whether it adds or subtracts is decided
    by `kind` alone. `occurred_on` is a fixed-width ``YYYY-MM-DD`` string so
    that lexicographic and chronological order agree.
    """

    id: str = Field(..., min_length=1, description="Opaque unique identifier.")
    kind: TransactionKind = Field(..., description="INCOME or EXPENSE.")
    title: str = Field("", description="Free-text label.")
    category: Category = Field(Category.OUTROS, description="Closed category tag.")
    amount_minor_units: int = Field(
        ..., ge=0, alias="amountMinorUnits", description="Amount in centavos."
    )
    occurred_on: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        alias="occurredOn",
        description="Calendar date of the financial effect.",
    )
    created_at: str = Field(..., alias="createdAt", description="Creation timestamp (ISO-8601).")
    payment_method: PaymentMethod = Field(
        PaymentMethod.PIX, alias="paymentMethod", description="How it was paid."
    )
    status: TransactionStatus = Field(TransactionStatus.PAID, description="paid or pending.")

    model_config = _FROZEN

    @property
    def month_key(self) -> str:
        return self.occurred_on[:7]

    @property
    def is_credit_spend(self) -> bool:
        return self.kind is TransactionKind.EXPENSE and self.payment_method is PaymentMethod.CREDIT

    def to_wire(self) -> Dict[str, Any]:
        """Serialize using the camelCase names of the stored blob."""
        return self.model_dump(mode="json", by_alias=True)


class FinanceSummary(BaseModel):
    """Totals over a set of records; `credit` is the credit-card subset of `expense`."""

    income: int = 0
    expense: int = 0
    credit: int = 0
    balance: int = 0

    model_config = _FROZEN


class MetricDelta(BaseModel):
    current: int
    previous: int
    delta: int
    pct: Optional[float] = Field(None, description="Percentage change; None when previous is 0.")
    direction: TrendDirection

    model_config = _FROZEN


class MonthComparisonResult(BaseModel):
    current: FinanceSummary
    previous: FinanceSummary
    income: MetricDelta
    expense: MetricDelta
    credit: MetricDelta
    balance: MetricDelta
    current_month_key: str
    previous_month_key: str

    model_config = _FROZEN


class CategoryTotal(BaseModel):
    category: Category
    total: int

    model_config = _FROZEN


class MonthlyTotals(BaseModel):
    month: str
    income: int = 0
    expense: int = 0

    model_config = _FROZEN


__all__ = [
    "Category",
    "CategoryTotal",
    "FinanceSummary",
    "MetricDelta",
    "MonthComparisonResult",
    "MonthlyTotals",
    "PaymentMethod",
    "TransactionKind",
    "TransactionRecord",
    "TransactionStatus",
    "TrendDirection",
]
