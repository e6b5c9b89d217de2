"""Session and transaction lifecycle on top of a Motor client.

A ``Transaction`` owns exactly one client session. ``run_in_transaction``
drives a body coroutine inside it and turns the body's ``StepOutcome`` (or
its exceptions) into a commit or an abort.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from pymongo import ReadPreference
from pymongo.errors import PyMongoError

from order_transactions.errors import (
    BusinessRuleViolation,
    SessionUnavailable,
    StoreOperationFailed,
    TransactionCommitFailed,
)

logger = logging.getLogger(__name__)

RETRYABLE_LABELS = ("TransientTransactionError", "UnknownTransactionCommitResult")


@dataclass(frozen=True)
class StepOutcome:
    """What a transaction body decided: go ahead and commit, or reject."""

    value: Any = None
    rejection: Optional[BusinessRuleViolation] = None

    @property
    def rejected(self) -> bool:
        return self.rejection is not None

    @classmethod
    def proceed(cls, value: Any = None) -> "StepOutcome":
        return cls(value=value)

    @classmethod
    def reject(cls, reason: BusinessRuleViolation) -> "StepOutcome":
        return cls(rejection=reason)


@dataclass(frozen=True)
class TransactionResult:
    committed: bool
    value: Any = None
    rejection: Optional[BusinessRuleViolation] = None


class Transaction:
    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    COMMIT_FAILED = "commit_failed"
    ABORTED = "aborted"

    def __init__(self, client) -> None:
        self._client = client
        self.session = None
        self.state = self.IDLE

    async def begin(self) -> None:
        try:
            self.session = await self._client.start_session(causal_consistency=True)
        except PyMongoError as exc:
            raise SessionUnavailable(f"Could not start a session: {exc}") from exc
        try:
            # Reads inside a transaction must go to the primary.
            self.session.start_transaction(read_preference=ReadPreference.PRIMARY)
        except PyMongoError as exc:
            await self.end()
            raise SessionUnavailable(f"Could not start a transaction: {exc}") from exc
        self.state = self.ACTIVE

    async def commit(self) -> None:
        if self.state != self.ACTIVE:
            raise TransactionCommitFailed(f"Cannot commit a transaction in state {self.state}")
        try:
            await self.session.commit_transaction()
        except PyMongoError as exc:
            self.state = self.COMMIT_FAILED
            retryable = any(exc.has_error_label(label) for label in RETRYABLE_LABELS)
            raise TransactionCommitFailed(f"Commit failed: {exc}", retryable=retryable) from exc
        self.state = self.COMMITTED

    async def abort(self) -> bool:
        """Abort at most once. Returns False when there was nothing to abort."""
        if self.state not in (self.ACTIVE, self.COMMIT_FAILED):
            return False
        self.state = self.ABORTED
        if not self.session.in_transaction:
            logger.debug("Session no longer in a transaction, skipping abortTransaction")
            return True
        try:
            await self.session.abort_transaction()
        except PyMongoError as exc:
            logger.warning("abortTransaction failed: %s", exc)
        return True

    async def end(self) -> None:
        if self.session is not None:
            await self.session.end_session()

    async def __aenter__(self) -> "Transaction":
        await self.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.abort()
        finally:
            await self.end()


Body = Callable[[Any], Awaitable[StepOutcome]]


async def run_in_transaction(client, body: Body) -> TransactionResult:
    """Run ``body(session)`` in a fresh transaction and commit or abort it."""
    async with Transaction(client) as txn:
        try:
            outcome = await body(txn.session)
        except BusinessRuleViolation as exc:
            outcome = StepOutcome.reject(exc)
        except PyMongoError as exc:
            print(f"✗ Transaction failed: {exc}")
            await txn.abort()
            print("✓ Transaction aborted/rolled back")
            raise StoreOperationFailed(f"Store operation failed: {exc}") from exc
        except Exception:
            await txn.abort()
            raise

        if outcome.rejected:
            print(f"✗ Transaction failed: {outcome.rejection}")
            await txn.abort()
            logger.info("Transaction rejected by business rule: %s", outcome.rejection)
            print("✓ Transaction aborted - all changes rolled back")
            return TransactionResult(committed=False, rejection=outcome.rejection)

        try:
            await txn.commit()
        except TransactionCommitFailed as exc:
            print(f"✗ Transaction failed: {exc}")
            await txn.abort()
            print("✓ Transaction aborted/rolled back")
            raise
        print("✓ Transaction committed successfully!")
        return TransactionResult(committed=True, value=outcome.value)
