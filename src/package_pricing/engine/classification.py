"""
Billing Classification Resolver - Finds whether a catalog item bills per hour.

The catalog is a nested, unsorted tree (sections -> categories -> items).
classify() walks it once per lookup; BillingClassificationResolver walks it
once up front and answers every later lookup from an index.
"""
from .errors import ClassificationNotFound
from .models import Catalog, normalize_billing_type


def classify(item_id: str, catalog: Catalog) -> str:
    """
    Return the billing type (HOUR or SERVICE) of an item.

    Raises ClassificationNotFound if no item in the catalog has this id.
    """
    item_id = str(item_id).strip()
    for item in catalog.iter_items():
        if str(item.id).strip() == item_id:
            return normalize_billing_type(item.billing_type)
    raise ClassificationNotFound(item_id)


class BillingClassificationResolver:
    """Indexes a catalog by item id for repeated billing type lookups."""

    def __init__(self, catalog: Catalog):
        self.index: dict[str, str] = {}
        for item in catalog.iter_items():
            # First occurrence wins, matching a linear search
            self.index.setdefault(str(item.id).strip(), normalize_billing_type(item.billing_type))

    def classify(self, item_id: str) -> str:
        """Return the billing type of an item, or raise ClassificationNotFound."""
        item_id = str(item_id).strip()
        try:
            return self.index[item_id]
        except KeyError:
            raise ClassificationNotFound(item_id) from None

    def __contains__(self, item_id: str) -> bool:
        return str(item_id).strip() in self.index
