"""
Transaction Processing Module

Folds an ordered stream of transactions into per-client ledgers. Order is
significant: disputes, resolves and chargebacks refer back to deposits seen
earlier. A transaction a ledger rejects is logged and skipped; malformed
input and arithmetic overflow abort the run.
"""

from typing import Dict, Iterable, List, Optional, TextIO

from .accounts import AccountSnapshot, ClientAccount, TransactionApplyError
from .config import get_config
from .input_output import read_transactions
from .logging_config import get_logger, log_action
from .transactions import Transaction


class TransactionProcessor:
    """
    Routes each transaction to its client's ledger, creating ledgers on
    first reference
    """

    def __init__(self, accounts: Optional[Dict[int, ClientAccount]] = None):
        self.accounts: Dict[int, ClientAccount] = accounts if accounts is not None else {}
        self.rejections: List[TransactionApplyError] = []
        self.processed_count = 0
        self.logger = get_logger("payments_engine.processor")

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        account = self.accounts.get(client_id)
        if account is None:
            account = ClientAccount(client_id)
            self.accounts[client_id] = account
        return account

    def process(self, transaction: Transaction) -> Optional[TransactionApplyError]:
        """
        Apply one transaction to its client's ledger.

        Returns:
            The rejection if the ledger refused the transaction, else None
        """
        account = self.get_or_create_account(transaction.client)
        self.processed_count += 1
        try:
            account.apply(transaction)
        except TransactionApplyError as e:
            self.rejections.append(e)
            log_action(
                self.logger,
                get_config().rejection_log_level,
                f"Error applying transaction: {e}. Continuing.",
                client=e.client,
                tx=e.tx,
                action=e.attempted_action,
                extra={"error": type(e).__name__}
            )
            return e
        return None

    def process_all(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply transactions strictly in iteration order"""
        for transaction in transactions:
            self.process(transaction)
        self.logger.debug(
            f"Processed {self.processed_count} transactions for {len(self.accounts)} clients, "
            f"{len(self.rejections)} rejected"
        )
        return self.accounts

    def snapshots(self, sort_by_client: bool = True) -> List[AccountSnapshot]:
        accounts = self.accounts.values()
        if sort_by_client:
            accounts = sorted(accounts, key=lambda account: account.id)
        return [account.snapshot() for account in accounts]


def process_transactions(input_stream: TextIO) -> Dict[int, ClientAccount]:
    """Process CSV text into a fresh client-id to ledger mapping"""
    accounts: Dict[int, ClientAccount] = {}
    process_transactions_into_accounts(input_stream, accounts)
    return accounts


def process_transactions_into_accounts(
    input_stream: TextIO,
    accounts: Dict[int, ClientAccount]
) -> TransactionProcessor:
    """
    Process CSV text into an existing mapping, creating missing ledgers.

    Raises:
        TransactionConversionError: A row cannot be converted
        FixedPointOverflowError: A balance would leave the Money range
    """
    processor = TransactionProcessor(accounts)
    processor.process_all(read_transactions(input_stream))
    return processor
