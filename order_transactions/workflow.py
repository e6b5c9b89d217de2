"""The demo workflow: one committed reconciliation, one rejected insert."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from order_transactions.errors import BusinessRuleViolation
from order_transactions.models import Account, Purchase, apply_discount, money, utcnow
from order_transactions.reconcile import AtomicUpsert, FindThenWrite, Reconciliation, Strategy
from order_transactions.report import display_collections
from order_transactions.session import StepOutcome, TransactionResult, run_in_transaction

logger = logging.getLogger(__name__)

ACCOUNT_NAME = "John Doe"
ACCOUNT_UPDATED_NAME = "John Doe (Updated)"
ACCOUNT_EMAIL = "john.doe@example.com"

LAPTOP = "Laptop Computer"
MOUSE = "Wireless Mouse"
KEYBOARD = "Mechanical Keyboard"

LAPTOP_PRICE = Decimal("1299.99")
LAPTOP_NEW_PRICE = Decimal("1399.99")
MOUSE_PRICE = Decimal("49.99")
MOUSE_DISCOUNT = Decimal("0.20")
KEYBOARD_PRICE = Decimal("129.99")

REJECTED_NAME = "Jane Smith"
REJECTED_EMAIL = "jane.smith@example.com"
REJECTED_PRODUCT = "Tablet"
REJECTED_PRICE = Decimal("599.99")


def refresh_account(existing):
    return {"name": ACCOUNT_UPDATED_NAME, "created_at": utcnow()}


def reprice(amount: Decimal):
    """Overwrite the stored amount with ``amount``."""

    def mutate(existing):
        return {"amount": money(amount), "ordered_at": utcnow()}

    return mutate


def discount(rate: Decimal):
    """Reduce the stored amount by ``rate``.

    The discount is taken from whatever amount is stored, so every rerun
    compounds it.
    """

    def mutate(existing):
        return {"amount": apply_discount(existing["amount"], rate), "ordered_at": utcnow()}

    return mutate


@dataclass(frozen=True)
class ProductLine:
    product: str
    price: Decimal
    strategy: Strategy


DEFAULT_CATALOG = (
    ProductLine(LAPTOP, LAPTOP_PRICE, FindThenWrite(reprice(LAPTOP_NEW_PRICE))),
    ProductLine(MOUSE, MOUSE_PRICE, FindThenWrite(discount(MOUSE_DISCOUNT))),
    ProductLine(KEYBOARD, KEYBOARD_PRICE, AtomicUpsert()),
)


@dataclass
class ReconcileSummary:
    account: Reconciliation
    purchases: List[Reconciliation] = field(default_factory=list)


class WorkflowRunner:
    def __init__(
        self,
        store,
        catalog: Sequence[ProductLine] = DEFAULT_CATALOG,
        account_strategy: Optional[Strategy] = None,
    ) -> None:
        self.store = store
        self.catalog = tuple(catalog)
        self.account_strategy = account_strategy or FindThenWrite(refresh_account)

    async def reconcile_orders(self) -> TransactionResult:
        return await run_in_transaction(self.store.client, self._reconcile_body)

    async def demonstrate_rollback(self) -> TransactionResult:
        return await run_in_transaction(self.store.client, self._rejected_body)

    async def run(self) -> None:
        print("Starting transactional insert/update...")
        await self.reconcile_orders()

        print("\nVerifying data after transaction:")
        await display_collections(self.store)

        print("\n" + "=" * 50)
        print("Demonstrating failed transaction (will rollback):")
        await self.demonstrate_rollback()

        print("\nVerifying data after failed transaction (should be unchanged):")
        await display_collections(self.store)

    async def _reconcile_body(self, session) -> StepOutcome:
        account = Account(name=ACCOUNT_NAME, email=ACCOUNT_EMAIL, created_at=utcnow())
        outcome = await self.account_strategy.reconcile(
            self.store.accounts, {"email": ACCOUNT_EMAIL}, account.to_document(), session
        )
        account_id = outcome.document_id
        if account_id is None:
            # Upserts that replace report no id; read it back.
            found = await self.store.accounts.find_one({"email": ACCOUNT_EMAIL}, session=session)
            account_id = found["_id"]
        _report_account(outcome, account_id)

        summary = ReconcileSummary(account=outcome)
        for line in self.catalog:
            purchase = Purchase(
                account_id=account_id,
                product=line.product,
                amount=line.price,
                ordered_at=utcnow(),
            )
            key = {"account_id": account_id, "product": line.product}
            result = await line.strategy.reconcile(
                self.store.purchases, key, purchase.to_document(), session
            )
            _report_purchase(line, result)
            summary.purchases.append(result)
        return StepOutcome.proceed(summary)

    async def _rejected_body(self, session) -> StepOutcome:
        account = Account(name=REJECTED_NAME, email=REJECTED_EMAIL, created_at=utcnow())
        result = await self.store.accounts.insert_one(account.to_document(), session=session)
        account.id = result.inserted_id
        print(f"✓ Inserted account: {account.name} (ID: {account.id})")

        purchase = Purchase(
            account_id=account.id,
            product=REJECTED_PRODUCT,
            amount=REJECTED_PRICE,
            ordered_at=utcnow(),
        )
        result = await self.store.purchases.insert_one(purchase.to_document(), session=session)
        print(
            f"✓ Inserted purchase: {purchase.product} for ${purchase.amount} "
            f"(ID: {result.inserted_id})"
        )

        print("Simulating business logic error...")
        return StepOutcome.reject(BusinessRuleViolation("Simulated business logic failure"))


def _report_account(outcome: Reconciliation, account_id) -> None:
    name = outcome.after.get("name") if outcome.after else ACCOUNT_NAME
    if outcome.inserted:
        print(f"✓ Inserted new account: {name} (ID: {account_id})")
    else:
        print(f"✓ Updated existing account: {name} (ID: {account_id})")


def _report_purchase(line: ProductLine, outcome: Reconciliation) -> None:
    after = outcome.after["amount"] if outcome.after else line.price
    if isinstance(line.strategy, AtomicUpsert):
        verb = "Inserted new" if outcome.inserted else "Updated"
        print(f"✓ {verb} {line.product} purchase via upsert: ${after}")
    elif outcome.inserted:
        print(f"✓ Inserted new {line.product} purchase: ${after} (ID: {outcome.document_id})")
    else:
        before = outcome.before["amount"]
        print(f"✓ Updated {line.product} purchase: amount changed from ${before} to ${after}")
        logger.debug("Purchase %s amount %s -> %s", outcome.document_id, before, after)
