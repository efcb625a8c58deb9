"""
Read-only Record Projections

Immutable snapshots of the rows this engine reads. They are produced fresh
per request by the data store; nothing here is persisted or mutated.
Money fields are integer cents.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence, Tuple

from marketplace_analytics.domain.money import line_revenue


# =============================================================================
# ENUMERATIONS
# =============================================================================

class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class VerificationStatus(str, Enum):
    """Store verification status"""
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class UserRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


OPEN_ORDER_STATUSES: Tuple[OrderStatus, ...] = (OrderStatus.PENDING, OrderStatus.PROCESSING)
REVERSED_ORDER_STATUSES: Tuple[OrderStatus, ...] = (OrderStatus.CANCELLED, OrderStatus.REFUNDED)

DEFAULT_CATEGORY = "Other"


# =============================================================================
# RECORDS
# =============================================================================

@dataclass(frozen=True)
class StoreRecord:
    id: str
    owner_id: str
    name: str
    city: Optional[str] = None
    state: Optional[str] = None
    verification_status: VerificationStatus = VerificationStatus.PENDING

    @property
    def is_active(self) -> bool:
        return self.verification_status == VerificationStatus.VERIFIED


@dataclass(frozen=True)
class ProductRecord:
    id: str
    store_id: str
    name: str
    stock: int = 0
    price: int = 0
    category: Optional[str] = None

    @property
    def category_or_default(self) -> str:
        return self.category.strip() if self.category and self.category.strip() else DEFAULT_CATEGORY


@dataclass(frozen=True)
class OrderRecord:
    id: str
    buyer_id: str
    total_amount: int
    status: OrderStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class OrderItemRecord:
    order_id: str
    product_id: str
    unit_price: int
    quantity: int

    @property
    def line_revenue(self) -> int:
        return line_revenue(self.unit_price, self.quantity)


@dataclass(frozen=True)
class UserRecord:
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole = UserRole.BUYER


@dataclass(frozen=True)
class OrderFilter:
    """
    Push-down filter for order fetches.

    ``statuses`` empty means any status. Bounds are inclusive on
    ``date_from`` and exclusive on ``date_to``.
    """
    statuses: Tuple[OrderStatus, ...] = field(default_factory=tuple)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    limit: Optional[int] = None
    newest_first: bool = False

    @classmethod
    def of(
        cls,
        statuses: Sequence[OrderStatus] = (),
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> "OrderFilter":
        return cls(
            statuses=tuple(OrderStatus(s) for s in statuses),
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            newest_first=newest_first,
        )

    def matches(self, order: OrderRecord) -> bool:
        if self.statuses and order.status not in self.statuses:
            return False
        if self.date_from is not None and order.created_at < self.date_from:
            return False
        if self.date_to is not None and order.created_at >= self.date_to:
            return False
        return True
