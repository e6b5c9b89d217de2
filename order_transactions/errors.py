class OrderTransactionsError(Exception):
    """Base class for errors raised by the transaction workflow."""


class SessionUnavailable(OrderTransactionsError):
    """No session or transaction could be opened against the replica set."""


class TransactionCommitFailed(OrderTransactionsError):
    """The server rejected the commit.

    ``retryable`` is set when the server labelled the failure as transient,
    in which case the whole transaction body may be run again.
    """

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class BusinessRuleViolation(OrderTransactionsError):
    """Application logic refused the transaction; it is aborted, not retried."""


class StoreOperationFailed(OrderTransactionsError):
    """A read or write inside a transaction failed at the driver level."""
