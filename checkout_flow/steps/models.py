"""
Pydantic models for the checkout read model.

A CheckoutSnapshot is one observation of the checkout data owned by the
data-loading collaborator:
- Cart (physical and digital line items)
- Checkout (promotions, totals)
- Customer (guest or signed in, store credit)
- Consignments (shipping address and method per shipment)
- Billing address
- StoreConfig (absent until the store configuration has loaded)
- Order (present once an order has been submitted)

Snapshots are frozen. The navigator re-derives step statuses from every new
snapshot instead of mutating one.
"""

from pydantic import BaseModel, ConfigDict, Field


class SnapshotModel(BaseModel):
    """Base class for all read-model objects."""

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Cart
# =============================================================================

class LineItem(SnapshotModel):
    """A single cart line."""

    id: str
    name: str = ""
    quantity: int = 1
    sale_price: float = 0.0
    category_names: list[str] = Field(default_factory=list)


class LineItems(SnapshotModel):
    """Cart lines grouped by fulfilment kind."""

    physical_items: list[LineItem] = Field(default_factory=list)
    digital_items: list[LineItem] = Field(default_factory=list)

    def count(self) -> int:
        return len(self.physical_items) + len(self.digital_items)


class Cart(SnapshotModel):
    """Shopping cart being checked out."""

    id: str
    currency: str = "USD"
    line_items: LineItems = Field(default_factory=LineItems)

    def has_physical_items(self) -> bool:
        """Check if anything in the cart needs to be shipped."""
        return len(self.line_items.physical_items) > 0

    def is_empty(self) -> bool:
        return self.line_items.count() == 0


# =============================================================================
# Checkout
# =============================================================================

class Promotion(SnapshotModel):
    """A promotion with banners shown above the steps."""

    id: str | None = None
    banners: list[str] = Field(default_factory=list)


class Checkout(SnapshotModel):
    """Checkout resource (promotions and totals)."""

    id: str
    promotions: list[Promotion] = Field(default_factory=list)
    subtotal: float = 0.0
    grand_total: float = 0.0


# =============================================================================
# Customer and addresses
# =============================================================================

class Customer(SnapshotModel):
    """Shopper record. Guests have is_guest=True."""

    id: int = 0
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    is_guest: bool = True
    store_credit: float = 0.0

    def is_signed_in(self) -> bool:
        return not self.is_guest


class Address(SnapshotModel):
    """Postal address."""

    first_name: str = ""
    last_name: str = ""
    address1: str = ""
    address2: str = ""
    city: str = ""
    state_or_province: str = ""
    postal_code: str = ""
    country_code: str = ""
    phone: str = ""

    def is_filled(self) -> bool:
        """Check if the address carries at least a street and a country."""
        return bool(self.address1 and self.country_code)


class BillingAddress(Address):
    """Billing address. Guest checkout stores the shopper email here."""

    email: str | None = None


class ShippingOption(SnapshotModel):
    """Shipping method offered for a consignment."""

    id: str
    description: str = ""
    cost: float = 0.0


class Consignment(SnapshotModel):
    """A shipment of line items to one address."""

    id: str
    line_item_ids: list[str] = Field(default_factory=list)
    shipping_address: Address | None = None
    selected_shipping_option: ShippingOption | None = None

    def is_complete(self) -> bool:
        """A consignment is complete once it has an address and a method."""
        return self.shipping_address is not None and self.selected_shipping_option is not None


# =============================================================================
# Store configuration and order
# =============================================================================

class StoreLinks(SnapshotModel):
    """Store links used for outbound navigation."""

    site_link: str = ""
    login_link: str = ""
    cart_link: str = ""


class StoreConfig(SnapshotModel):
    """Store configuration. Its presence means checkout data has loaded."""

    store_name: str = ""
    links: StoreLinks = Field(default_factory=StoreLinks)


class Order(SnapshotModel):
    """Order created by a successful payment submission."""

    order_id: int
    status: str = "pending"


class CheckoutSnapshot(SnapshotModel):
    """One immutable observation of everything the orchestrator reads."""

    cart: Cart | None = None
    checkout: Checkout | None = None
    customer: Customer | None = None
    consignments: list[Consignment] | None = None
    shipping_address: Address | None = None
    billing_address: BillingAddress | None = None
    config: StoreConfig | None = None
    order: Order | None = None

    @property
    def is_loaded(self) -> bool:
        return self.config is not None

    def get_promotions(self) -> list[Promotion]:
        if self.checkout is None:
            return []
        return list(self.checkout.promotions)

    def get_store_credit(self) -> float:
        if self.customer is None:
            return 0.0
        return self.customer.store_credit
