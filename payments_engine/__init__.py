"""
Payments Engine

Applies a stream of client transactions (deposits, withdrawals, disputes,
resolves, chargebacks) to per-client ledgers using exact fixed-point
decimal arithmetic.
"""

__version__ = "1.0.0"
