# inventory/domain/product.py
# Defines the Product record and the search filter used by the product repository.

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from inventory.api.errors import ValidationError
from inventory.utils.logger import logger

PRICE_QUANTUM = Decimal("0.01")  # DECIMAL(13,2)


def to_price(value: Any) -> Decimal:
    """Converts a driver/JSON value to a two-digit Decimal. Floats go through str() to avoid binary noise."""
    if isinstance(value, Decimal):
        price = value
    elif isinstance(value, float):
        price = Decimal(str(value))
    else:
        try:
            price = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValidationError(f"Invalid price value: '{value}'.") from e
    if not price.is_finite():
        raise ValidationError(f"Invalid price value: '{value}'.")
    return price.quantize(PRICE_QUANTUM)


@dataclass(frozen=True)
class Product:
    """
    A single inventory item. Immutable.

    product_id is assigned by the database on insert and is the only identity;
    every other field can be overwritten by an update.
    """
    product_id: int
    manufacturer: str
    sku: str
    upc: str
    price_per_unit: Decimal
    quantity_on_hand: int
    product_name: str

    def with_id(self, product_id: int) -> 'Product':
        """Returns a copy carrying the given identifier."""
        return replace(self, product_id=product_id)

    def validate(self) -> None:
        """Raises ValidationError when the mutable fields break the table constraints."""
        if not isinstance(self.price_per_unit, Decimal):
            raise ValidationError("pricePerUnit must be a decimal value.")
        if self.price_per_unit < 0:
            raise ValidationError("pricePerUnit cannot be negative.")
        if isinstance(self.quantity_on_hand, bool) or not isinstance(self.quantity_on_hand, int):
            raise ValidationError("quantityOnHand must be an integer.")
        if self.quantity_on_hand < 0:
            raise ValidationError("quantityOnHand cannot be negative.")

    def to_dict(self) -> Dict[str, Any]:
        """Converts the Product to its JSON shape. The price is a string to keep fixed-point precision."""
        return {
            'productId': self.product_id,
            'manufacturer': self.manufacturer,
            'sku': self.sku,
            'upc': self.upc,
            'pricePerUnit': str(self.price_per_unit),
            'quantityOnHand': self.quantity_on_hand,
            'productName': self.product_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """Creates a Product from a request body. A missing productId becomes 0 (unassigned)."""
        if not isinstance(data, dict):
            logger.error(f"Invalid data type for Product.from_dict: {type(data)}")
            raise ValidationError("Invalid data format for Product.")

        try:
            product_id = int(data.get('productId') or 0)
            quantity = int(data.get('quantityOnHand', 0))
        except (TypeError, ValueError) as e:
            raise ValidationError(f"productId and quantityOnHand must be integers: {e}") from e

        return cls(
            product_id=product_id,
            manufacturer=str(data.get('manufacturer', '')),
            sku=str(data.get('sku', '')),
            upc=str(data.get('upc', '')),
            price_per_unit=to_price(data.get('pricePerUnit', 0)),
            quantity_on_hand=quantity,
            product_name=str(data.get('productName', '')),
        )


@dataclass(frozen=True)
class ProductFilter:
    """Optional substring filters for product search. An empty string means "not specified"."""
    name_filter: str = ""
    manufacturer_filter: str = ""
    sku_filter: str = ""

    def is_empty(self) -> bool:
        return not (self.name_filter or self.manufacturer_filter or self.sku_filter)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ProductFilter':
        """Creates a filter from the report request body (productName / manufacturer / sku keys)."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValidationError("Invalid data format for product filter.")
        return cls(
            name_filter=str(data.get('productName') or ''),
            manufacturer_filter=str(data.get('manufacturer') or ''),
            sku_filter=str(data.get('sku') or ''),
        )
