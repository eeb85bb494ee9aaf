# api/schemas.py
"""Request payloads accepted by the HTTP layer."""

from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from settlement import Expense

# Keeps cent rounding well inside the default 28 digit Decimal context
MAX_AMOUNT = Decimal("999999999999.99")


class ExpenseIn(BaseModel):
    """One logged expense as sent by the frontend."""

    payer: str
    amount: Decimal
    # Older clients send the split list as 'involved'
    participants: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("participants", "involved"),
    )

    @field_validator("payer")
    @classmethod
    def validate_payer(cls, value):
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Payer cannot be blank.")
        return trimmed

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, value):
        if isinstance(value, bool):
            raise ValueError("Amount must be a number.")
        text = str(value).strip()
        # Decimal() also takes "1_000"; the form only sends plain numbers
        if "_" in text:
            raise ValueError("Amount must be a number.")
        try:
            amount = Decimal(text)
        except InvalidOperation as exc:
            raise ValueError("Amount must be a number.") from exc
        if not amount.is_finite() or amount <= 0:
            raise ValueError("Amount must be greater than zero.")
        if amount > MAX_AMOUNT:
            raise ValueError("Amount is too large.")
        return amount

    @field_validator("participants", mode="before")
    @classmethod
    def split_participants(cls, value):
        if value is None:
            return []
        # The form field is a comma separated string
        if isinstance(value, str):
            value = value.split(",")
        return value

    @field_validator("participants")
    @classmethod
    def strip_participants(cls, value):
        return [name.strip() for name in value if name.strip()]

    def to_expense(self):
        return Expense(self.payer, self.amount, tuple(self.participants))


class ExpenseBatch(BaseModel):
    expenses: List[ExpenseIn] = Field(default_factory=list)
    # Extra names to split "everyone" expenses with, even if they never paid
    people: List[str] = Field(default_factory=list)

    @field_validator("people")
    @classmethod
    def strip_people(cls, value):
        return [name.strip() for name in value if name.strip()]

    @classmethod
    def from_json(cls, data):
        # The calculator route has always taken a bare list of expenses
        if isinstance(data, list):
            data = {"expenses": data}
        return cls.model_validate(data)

    def to_expenses(self):
        return [item.to_expense() for item in self.expenses]


class SummaryRequest(ExpenseBatch):
    settlements: Optional[str] = None
