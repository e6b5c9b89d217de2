from dataclasses import dataclass, field
from typing import List

from order_transactions.models import Account, Purchase


@dataclass
class Snapshot:
    accounts: List[Account] = field(default_factory=list)
    purchases: List[Purchase] = field(default_factory=list)


async def load_snapshot(store) -> Snapshot:
    """Read both collections in full, outside of any session."""
    accounts = await store.accounts.find({}).to_list(length=None)
    purchases = await store.purchases.find({}).to_list(length=None)
    return Snapshot(
        accounts=[Account.from_document(doc) for doc in accounts],
        purchases=[Purchase.from_document(doc) for doc in purchases],
    )


def render_snapshot(snapshot: Snapshot) -> List[str]:
    lines = ["", f"Accounts in database: {len(snapshot.accounts)}"]
    for account in snapshot.accounts:
        lines.append(f"  - {account.name} ({account.email}) - ID: {account.id}")
    lines.append("")
    lines.append(f"Purchases in database: {len(snapshot.purchases)}")
    for purchase in snapshot.purchases:
        lines.append(
            f"  - {purchase.product}: ${purchase.amount} for Account ID: {purchase.account_id}"
        )
    return lines


async def display_collections(store) -> Snapshot:
    snapshot = await load_snapshot(store)
    for line in render_snapshot(snapshot):
        print(line)
    return snapshot
