"""
Transaction Model Module

Immutable description of one event in the input stream. Deposits and
withdrawals carry an amount; disputes, resolves and chargebacks only
reference an earlier deposit by its transaction id.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .fixed_point import Money


CLIENT_ID_MAX = 2 ** 16 - 1
TX_ID_MAX = 2 ** 32 - 1


class TransactionType(Enum):
    """Closed set of supported transaction kinds"""
    DEPOSIT = "deposit"          # Credit client funds
    WITHDRAWAL = "withdrawal"    # Debit client funds
    DISPUTE = "dispute"          # Claim that a deposit was erroneous
    RESOLVE = "resolve"          # Dispute settled in the client's favour
    CHARGEBACK = "chargeback"    # Dispute settled by reversing the deposit

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


@dataclass(frozen=True)
class TransactionData:
    """Identifiers shared by every transaction kind"""
    client: int
    tx: int

    def __post_init__(self):
        if not 0 <= self.client <= CLIENT_ID_MAX:
            raise ValueError(f"Client id {self.client} outside 0..{CLIENT_ID_MAX}")
        if not 0 <= self.tx <= TX_ID_MAX:
            raise ValueError(f"Transaction id {self.tx} outside 0..{TX_ID_MAX}")


@dataclass(frozen=True)
class Transaction:
    """
    One event for one client.

    ``amount`` is required for deposits and withdrawals and must be
    non-negative; it must be None for the reference-only kinds.
    """
    transaction_type: TransactionType
    data: TransactionData
    amount: Optional[Money] = None

    def __post_init__(self):
        if self.transaction_type.carries_amount:
            if self.amount is None:
                raise ValueError(f"{self.transaction_type.value} requires an amount")
            if not isinstance(self.amount, Money):
                raise ValueError(f"Transaction amount must be Money, got {type(self.amount).__name__}")
            if self.amount.is_negative():
                raise ValueError("Transaction amount must not be negative")
        elif self.amount is not None:
            raise ValueError(f"{self.transaction_type.value} does not carry an amount")

    @classmethod
    def deposit(cls, client: int, tx: int, amount: Union[Money, str]) -> "Transaction":
        return cls(TransactionType.DEPOSIT, TransactionData(client, tx), _as_money(amount))

    @classmethod
    def withdrawal(cls, client: int, tx: int, amount: Union[Money, str]) -> "Transaction":
        return cls(TransactionType.WITHDRAWAL, TransactionData(client, tx), _as_money(amount))

    @classmethod
    def dispute(cls, client: int, tx: int) -> "Transaction":
        return cls(TransactionType.DISPUTE, TransactionData(client, tx))

    @classmethod
    def resolve(cls, client: int, tx: int) -> "Transaction":
        return cls(TransactionType.RESOLVE, TransactionData(client, tx))

    @classmethod
    def chargeback(cls, client: int, tx: int) -> "Transaction":
        return cls(TransactionType.CHARGEBACK, TransactionData(client, tx))

    @property
    def client(self) -> int:
        return self.data.client

    @property
    def tx(self) -> int:
        return self.data.tx

    @property
    def action_description(self) -> str:
        """Lowercase action name used in error and log messages"""
        return self.transaction_type.value

    def __str__(self) -> str:
        text = f"{self.action_description} client={self.client} tx={self.tx}"
        if self.amount is not None:
            text += f" amount={self.amount}"
        return text


def _as_money(amount: Union[Money, str]) -> Money:
    if isinstance(amount, str):
        return Money.parse(amount)
    return amount
