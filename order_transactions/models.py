from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Any, Dict, Mapping, Optional

from bson import ObjectId

CENT = Decimal("0.01")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def money(value) -> Decimal:
    """Round to cents, half-to-even."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_EVEN)


def apply_discount(amount: Decimal, rate: Decimal) -> Decimal:
    return money(Decimal(amount) * (Decimal(1) - rate))


@dataclass
class Account:
    name: str
    email: str
    created_at: datetime
    id: Optional[ObjectId] = None

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "name": self.name,
            "email": self.email,
            "created_at": self.created_at,
        }
        if self.id is not None:
            doc["_id"] = self.id
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Account":
        return cls(
            name=doc.get("name", ""),
            email=doc.get("email", ""),
            created_at=doc.get("created_at"),
            id=doc.get("_id"),
        )


@dataclass
class Purchase:
    account_id: ObjectId
    product: str
    amount: Decimal
    ordered_at: datetime
    id: Optional[ObjectId] = None

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "account_id": self.account_id,
            "product": self.product,
            "amount": money(self.amount),
            "ordered_at": self.ordered_at,
        }
        if self.id is not None:
            doc["_id"] = self.id
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Purchase":
        return cls(
            account_id=doc.get("account_id"),
            product=doc.get("product", ""),
            amount=Decimal(doc.get("amount", 0)),
            ordered_at=doc.get("ordered_at"),
            id=doc.get("_id"),
        )
