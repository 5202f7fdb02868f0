"""
CSV Input/Output Module

Reads transaction rows from CSV text and converts them to Transaction
values; writes one client record per account. Rows are validated with
pydantic models. Conversion failures are fatal for a run and always carry
the physical line number of the offending row.
"""

import csv
from typing import Iterable, Iterator, List, Optional, TextIO, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .accounts import AccountSnapshot
from .fixed_point import FixedPointParseError, Money
from .transactions import CLIENT_ID_MAX, TX_ID_MAX, Transaction, TransactionData, TransactionType


CLIENT_RECORD_FIELDS = ["client", "available", "held", "total", "locked"]


class TransactionConversionError(ValueError):
    """Base class for rows that cannot become a Transaction"""

    def __init__(self, message: str, row: Optional[dict] = None, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
        self.row = row
        self.line_number = line_number


class RowFormatError(TransactionConversionError):
    """Row is missing columns or has an invalid type or id"""


class MissingAmountError(TransactionConversionError):
    """Deposit or withdrawal without an amount"""


class AmountConversionError(TransactionConversionError):
    """Amount text is malformed, too precise or negative"""


class TransactionRow(BaseModel):
    """One CSV input row, before conversion"""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    transaction_type: TransactionType = Field(..., alias="type")
    client: int = Field(..., ge=0, le=CLIENT_ID_MAX)
    tx: int = Field(..., ge=0, le=TX_ID_MAX)
    amount: Optional[str] = None

    @field_validator("transaction_type", mode="before")
    @classmethod
    def normalize_type(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("amount", mode="before")
    @classmethod
    def blank_amount_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_transaction(self, line_number: Optional[int] = None) -> Transaction:
        """
        Convert this row to a Transaction.

        Raises:
            MissingAmountError: Deposit or withdrawal without amount
            AmountConversionError: Amount unparsable, too precise or negative
        """
        data = TransactionData(client=self.client, tx=self.tx)
        amount = None

        if self.transaction_type.carries_amount:
            if self.amount is None:
                raise MissingAmountError(
                    f"missing amount data in row {self.as_row()}", self.as_row(), line_number
                )
            try:
                amount = Money.parse(self.amount)
            except FixedPointParseError as e:
                raise AmountConversionError(
                    f"error converting decimal amount {self.amount!r}: {e}", self.as_row(), line_number
                ) from e
            if amount.is_negative():
                raise AmountConversionError(
                    f"negative amount {self.amount!r} not allowed", self.as_row(), line_number
                )

        return Transaction(self.transaction_type, data, amount)

    def as_row(self) -> dict:
        return {
            "type": self.transaction_type.value,
            "client": self.client,
            "tx": self.tx,
            "amount": self.amount
        }


class ClientRecord(BaseModel):
    """One CSV output row"""
    client: int
    available: str
    held: str
    total: str
    locked: bool

    @classmethod
    def from_snapshot(cls, snapshot: AccountSnapshot) -> "ClientRecord":
        return cls(
            client=snapshot.client,
            available=snapshot.available.to_string(),
            held=snapshot.held.to_string(),
            total=snapshot.total.to_string(),
            locked=snapshot.locked
        )

    def as_row(self) -> dict:
        row = self.model_dump()
        row["locked"] = "true" if self.locked else "false"
        return row


def read_transaction_rows(stream: TextIO) -> Iterator[Tuple[int, TransactionRow]]:
    """
    Lazily read validated rows from CSV text.

    Headers and cells are whitespace-trimmed; missing trailing cells are
    treated as absent, non-empty cells beyond the header are rejected.
    Yields ``(line_number, row)`` pairs.

    Raises:
        RowFormatError: A row fails validation
    """
    reader = csv.reader(stream)
    header = next(reader, None)
    if header is None:
        return
    fieldnames = [name.strip().lower() for name in header]

    for record in reader:
        cells = [cell.strip() for cell in record]
        if not any(cells):
            continue
        data = dict(zip(fieldnames, cells))
        if any(cells[len(fieldnames):]):
            raise RowFormatError(
                f"row has {len(cells)} fields but header has {len(fieldnames)}",
                data,
                reader.line_num
            )
        try:
            row = TransactionRow.model_validate(data)
        except ValidationError as e:
            raise RowFormatError(
                f"invalid transaction row {data}: {e.errors(include_url=False)}",
                data,
                reader.line_num
            ) from e
        yield reader.line_num, row


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """Lazily read CSV text as Transaction values, in input order"""
    for line_number, row in read_transaction_rows(stream):
        yield row.to_transaction(line_number)


def client_records(snapshots: Iterable[AccountSnapshot]) -> List[ClientRecord]:
    return [ClientRecord.from_snapshot(snapshot) for snapshot in snapshots]


def write_client_records(stream: TextIO, snapshots: Iterable[AccountSnapshot]) -> None:
    """Write a header and one CSV record per account snapshot"""
    writer = csv.DictWriter(stream, fieldnames=CLIENT_RECORD_FIELDS, lineterminator="\n")
    writer.writeheader()
    for record in client_records(snapshots):
        writer.writerow(record.as_row())
