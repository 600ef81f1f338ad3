"""Product catalog: priced templates that pre-fill invoice line items.

Selecting a product copies its name and price into a line; later catalog
edits or deletions never reach back into saved invoices.
"""
import logging
from typing import Callable, Iterable, List, Optional

from billing.core.audit import AuditLog
from billing.core.exceptions import NotFoundError
from billing.schemas.product import Product, ProductType
from billing.services.app_state_service import BlobStore, PRODUCTS_KEY

logger = logging.getLogger(__name__)

DEFAULT_PRODUCTS = [
    Product(id="1", name="Ready-made Card (Any Occasion)", type=ProductType.READYMADE, price=250),
    Product(id="2", name="Personalized Card", type=ProductType.PERSONALIZED, price=500),
    Product(id="3", name="Design Revision Fee", type=ProductType.PERSONALIZED, price=50),
    Product(id="4", name="Birthday Card", type=ProductType.READYMADE, price=250),
    Product(id="5", name="Christmas Card", type=ProductType.READYMADE, price=250),
    Product(id="6", name="Farewell Card", type=ProductType.READYMADE, price=250),
    Product(id="7", name="Best Wishes Card", type=ProductType.READYMADE, price=250),
    Product(id="8", name="Get Well Soon Card", type=ProductType.READYMADE, price=250),
    Product(id="9", name="Congratulations Card", type=ProductType.READYMADE, price=250),
    Product(id="10", name="Thank You Greeting Card", type=ProductType.READYMADE, price=250),
    Product(id="11", name="Womens Day Special", type=ProductType.READYMADE, price=250),
    Product(id="12", name="Ramzan Special – Eid Mubarak", type=ProductType.READYMADE, price=250),
]


class ProductCatalog:
    """
    In-memory product list with a persist hook.

    The catalog does not validate names or prices; the editing boundary
    (api.routes.products) rejects empty names and negative prices.
    """

    def __init__(
        self,
        products: Iterable[Product] = (),
        on_change: Optional[Callable[[List[Product]], None]] = None,
    ):
        self._products: List[Product] = [p.model_copy() for p in products]
        self._on_change = on_change

    @classmethod
    def load(cls, blobs: BlobStore) -> "ProductCatalog":
        """Load the saved catalog, seeding the default card range on first run."""
        stored = blobs.load(PRODUCTS_KEY)
        if stored is None:
            logger.info(f"[Catalog] No saved catalog, seeding {len(DEFAULT_PRODUCTS)} default products")
            products = DEFAULT_PRODUCTS
        else:
            products = [Product.model_validate(p) for p in stored]
            logger.info(f"[Catalog] Loaded {len(products)} products")

        def persist(items: List[Product]):
            blobs.save(PRODUCTS_KEY, [p.model_dump(mode="json") for p in items])

        return cls(products, on_change=persist)

    def list(self) -> List[Product]:
        return [p.model_copy() for p in self._products]

    def get(self, product_id: str) -> Optional[Product]:
        for p in self._products:
            if p.id == product_id:
                return p.model_copy()
        return None

    def _index_of(self, product_id: str) -> int:
        for i, p in enumerate(self._products):
            if p.id == product_id:
                return i
        return -1

    def _commit(self, products: List[Product]):
        # Persist first so a failed write leaves the in-memory catalog untouched
        if self._on_change is not None:
            self._on_change(products)
        self._products = products

    def add(self, product: Product) -> Product:
        self._commit(self._products + [product.model_copy()])
        AuditLog.log_action("create", "product", product.id, changes={"name": product.name, "price": product.price})
        return product

    def update(self, product: Product) -> Product:
        """Replace by id. Unknown ids raise NotFoundError."""
        idx = self._index_of(product.id)
        if idx < 0:
            raise NotFoundError(f"Product {product.id} not found")
        products = list(self._products)
        products[idx] = product.model_copy()
        self._commit(products)
        AuditLog.log_action("update", "product", product.id, changes={"name": product.name, "price": product.price})
        return product

    def remove(self, product_id: str) -> None:
        """Idempotent. Line items already copied from the product keep their values."""
        if self._index_of(product_id) < 0:
            logger.debug(f"[Catalog] Remove of unknown product {product_id} ignored")
            return
        self._commit([p for p in self._products if p.id != product_id])
        AuditLog.log_action("delete", "product", product_id)
