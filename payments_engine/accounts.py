"""
Client Account Module

Per-client ledger holding available and held funds, the lock flag and the
dispute lifecycle of every deposit. ``ClientAccount.apply`` is the only
operation that mutates a ledger; a rejected transaction leaves it exactly
as it was.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from .fixed_point import Money
from .transactions import Transaction, TransactionType


class TransactionState(Enum):
    """Dispute lifecycle of a recorded deposit"""
    VALID = "valid"                # Funds available to the client
    DISPUTED = "disputed"          # Funds moved to held
    CHARGED_BACK = "charged_back"  # Funds removed, terminal


class TransactionApplyError(ValueError):
    """Base class for transactions a ledger refuses to apply"""

    def __init__(self, message: str, transaction: Transaction):
        super().__init__(message)
        self.transaction = transaction

    @property
    def attempted_action(self) -> str:
        return self.transaction.action_description

    @property
    def client(self) -> int:
        return self.transaction.client

    @property
    def tx(self) -> int:
        return self.transaction.tx


class ClientLockedError(TransactionApplyError):
    """The account was charged back and accepts nothing further"""

    def __init__(self, transaction: Transaction):
        super().__init__(
            f"locked clients can't process transactions: client {transaction.client} "
            f"rejected {transaction}",
            transaction
        )


class NegativeBalanceError(TransactionApplyError):
    """A withdrawal asked for more than the available balance"""

    def __init__(self, transaction: Transaction, available: Money):
        super().__init__(
            f"negative balance not allowed, tx <{transaction}>, "
            f"current available balance: {available}",
            transaction
        )
        self.available = available


class MissingTransactionError(TransactionApplyError):
    """A dispute, resolve or chargeback referenced an unknown deposit"""

    def __init__(self, transaction: Transaction):
        super().__init__(
            f"attempted {transaction.action_description} on missing transaction: "
            f"client {transaction.client} doesn't have transaction {transaction.tx}",
            transaction
        )


class InvalidTransactionStateError(TransactionApplyError):
    """The referenced deposit is not in the state the action requires"""

    def __init__(
        self,
        transaction: Transaction,
        current_state: TransactionState,
        expected_state: TransactionState
    ):
        super().__init__(
            f"invalid transaction state for {transaction.action_description}: "
            f"transaction {transaction.tx} for client {transaction.client} "
            f"state is {current_state.value} but should be {expected_state.value}",
            transaction
        )
        self.current_state = current_state
        self.expected_state = expected_state


@dataclass(frozen=True)
class AccountSnapshot:
    """Point-in-time view of a ledger; total is derived, never stored"""
    client: int
    available: Money
    held: Money
    total: Money
    locked: bool


class ClientAccount:
    """
    Ledger for a single client.

    Withdrawals never take ``available`` below zero, but a dispute may:
    the disputed deposit can already have been spent.
    """

    def __init__(self, client_id: int):
        self.id = client_id
        self.available = Money.zero()
        self.held = Money.zero()
        self.locked = False
        self._deposit_transactions: Dict[int, Tuple[Transaction, TransactionState]] = {}

    def __repr__(self) -> str:
        return (
            f"ClientAccount({self.id}, available={self.available}, "
            f"held={self.held}, locked={self.locked})"
        )

    @property
    def total(self) -> Money:
        return self.available + self.held

    @property
    def deposit_count(self) -> int:
        return len(self._deposit_transactions)

    def transaction_state(self, tx: int) -> Optional[TransactionState]:
        """Get the dispute lifecycle state of a recorded deposit"""
        entry = self._deposit_transactions.get(tx)
        return entry[1] if entry else None

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client=self.id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked
        )

    def apply(self, transaction: Transaction) -> None:
        """
        Apply one transaction to this ledger.

        Args:
            transaction: Transaction already routed to this client

        Raises:
            ClientLockedError: Account is locked
            NegativeBalanceError: Withdrawal exceeds available funds
            MissingTransactionError: Referenced deposit is unknown
            InvalidTransactionStateError: Referenced deposit is in the wrong state
            FixedPointOverflowError: A balance would leave the Money range
        """
        if transaction.client != self.id:
            raise ValueError(f"Transaction for client {transaction.client} routed to account {self.id}")

        if self.locked:
            raise ClientLockedError(transaction)

        transaction_type = transaction.transaction_type

        if transaction_type == TransactionType.DEPOSIT:
            self.available = self.available + transaction.amount
            self._deposit_transactions[transaction.tx] = (transaction, TransactionState.VALID)

        elif transaction_type == TransactionType.WITHDRAWAL:
            if transaction.amount > self.available:
                raise NegativeBalanceError(transaction, self.available)
            self.available = self.available - transaction.amount

        elif transaction_type == TransactionType.DISPUTE:
            self._amend_deposit(
                transaction,
                TransactionState.VALID,
                TransactionState.DISPUTED,
                lambda amount: (self.available - amount, self.held + amount)
            )

        elif transaction_type == TransactionType.RESOLVE:
            self._amend_deposit(
                transaction,
                TransactionState.DISPUTED,
                TransactionState.VALID,
                lambda amount: (self.available + amount, self.held - amount)
            )

        elif transaction_type == TransactionType.CHARGEBACK:
            self._amend_deposit(
                transaction,
                TransactionState.DISPUTED,
                TransactionState.CHARGED_BACK,
                lambda amount: (self.available, self.held - amount)
            )
            self.locked = True

        else:
            raise ValueError(f"Unsupported transaction type: {transaction_type}")

    def _amend_deposit(
        self,
        transaction: Transaction,
        expected_state: TransactionState,
        final_state: TransactionState,
        amendment: Callable[[Money], Tuple[Money, Money]]
    ) -> None:
        """Move a referenced deposit to final_state and rebalance funds"""
        entry = self._deposit_transactions.get(transaction.tx)
        if entry is None:
            raise MissingTransactionError(transaction)

        deposit, current_state = entry
        if current_state != expected_state:
            raise InvalidTransactionStateError(transaction, current_state, expected_state)

        # Compute both balances first so an overflow leaves nothing half-applied
        available, held = amendment(deposit.amount)

        self._deposit_transactions[transaction.tx] = (deposit, final_state)
        self.available = available
        self.held = held
