#!/usr/bin/env python
import asyncio

from rich import print

from sdk.admin import AdminClient
from storefront.config import StoreSettings
from storefront.logging_config import setup_logging
from storefront.storefront import Storefront

async def main():
    settings = StoreSettings.from_env()
    setup_logging(settings.log_level, settings.log_file)
    admin = AdminClient(base_url=settings.api_url, api_key=settings.api_token)

    # -----------------------------
    # Reset and seed the catalog (operator)
    # -----------------------------
    print("Resetting store...")
    admin.reset()
    print("\nRegistering products...")
    print(admin.create_product("NK-AIR-1", 5, name="Air Runner", brand="Nike",
                               category="Shoes", price=120.0, originalPrice=150.0))
    print(admin.create_product("BK-PY-01", 3, name="Fluent Python", brand="O'Reilly",
                               category="Books", price=45.5))

    async with Storefront.open(settings.session(), settings) as store:
        # -----------------------------
        # Browse
        # -----------------------------
        await store.load()
        print("\nCatalog:", [p.sku for p in store.visible_products()])
        store.search_text = "nike"
        print("Search 'nike':", [p.sku for p in store.visible_products()])
        store.search_text, store.category = "", "Books"
        print("Category 'Books':", [p.sku for p in store.visible_products()])
        store.category = ""

        # -----------------------------
        # Build a cart
        # -----------------------------
        store.add_to_cart("NK-AIR-1")
        store.add_to_cart("NK-AIR-1")
        store.add_to_cart("BK-PY-01")
        print(f"\nCart: {store.cart.lines()} total ${store.cart_total():.2f}")

        # -----------------------------
        # Checkout and wait for the payment outcome
        # -----------------------------
        result = await store.place_order()
        print("\n", result)
        print(store.status)
        if store.poller is not None:
            state = await store.poller.wait()
            print(f"Poller finished: {state.value}")
        print(store.status)
        print("Stock after order:", {p.sku: p.quantity for p in store.snapshot})

if __name__ == "__main__":
    asyncio.run(main())
