"""Application service: Show Stock use case (query).

Reads one product from the catalog and reports its stock per size and per
location, plus how many units the shopper already holds in the cart.
"""

from __future__ import annotations

from storefront.application.dto import ProductStockDTO, SizeStockDTO
from storefront.application.remote import remote_call
from storefront.application.reservation_store import ReservationStore
from storefront.domain.exceptions import ProductNotFoundError
from storefront.domain.model.stock import SizedStock, normalize_stock
from storefront.domain.repository.catalog_store import ITEMS, CatalogStore


class ShowStockHandler:

    def __init__(
        self,
        catalog: CatalogStore,
        reservations: ReservationStore,
        *,
        timeout: float | None = None,
    ) -> None:
        self._catalog = catalog
        self._reservations = reservations
        self._timeout = timeout

    async def handle(self, product_id: str) -> ProductStockDTO:
        """Raises ProductNotFoundError or RemoteIOError; the CLI reports them."""
        document = await remote_call(
            self._catalog.get_by_id(ITEMS, product_id),
            self._timeout,
            f"reading product {product_id}",
        )
        if document is None:
            raise ProductNotFoundError(product_id)

        stock = normalize_stock(document)
        sizes: list[SizeStockDTO] = []
        if isinstance(stock, SizedStock):
            sizes = [
                SizeStockDTO(size=size, total=entry.total, locations=dict(entry.locations))
                for size, entry in stock.by_size.items()
            ]

        in_cart = sum(
            line.quantity.value
            for line in self._reservations.lines()
            if line.product_id == product_id
        )
        return ProductStockDTO(
            product_id=product_id,
            title=str(document.get("title") or product_id),
            total=stock.available(),
            sizes=sizes,
            in_cart=in_cart,
        )
