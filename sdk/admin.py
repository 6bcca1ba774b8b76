# sdk/admin.py
from typing import Optional, Dict, Any, List

import requests
from rich import print

PRODUCT_FIELDS = (
    "skuCode", "name", "description", "price", "originalPrice", "imageUrl",
    "category", "brand", "rating", "reviewCount", "quantity",
)

class AdminClient:
    """Synchronous catalog maintenance client for operators."""

    def __init__(self, base_url: str = "http://localhost:8080", api_key: Optional[str] = None,
                 timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api{path}"

    def reset(self):
        r = self.session.post(f"{self.base_url}/reset", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Catalog
    def list_products(self) -> List[Dict[str, Any]]:
        r = self.session.get(self._url("/inventory"), timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_product(self, sku: str) -> Optional[Dict[str, Any]]:
        r = self.session.get(self._url(f"/inventory/{sku}"), timeout=self.timeout)
        # unknown sku is an answer, not an error
        if r.status_code == 404:
            return None
        r.raise_for_status()
        return r.json()

    def create_product(self, sku: str, quantity: int = 0, **fields):
        payload = {"skuCode": sku, "quantity": quantity}
        payload.update({k: v for k, v in fields.items() if k in PRODUCT_FIELDS and v is not None})
        r = self.session.post(self._url("/inventory"), json=payload, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def update_product(self, product_id: int, **fields):
        """Merges `fields` over the current product and writes the whole record back."""
        current = next((p for p in self.list_products() if p["id"] == product_id), None)
        if current is None:
            raise LookupError(f"product {product_id} not found")
        payload = {k: current.get(k) for k in PRODUCT_FIELDS}
        payload.update({k: v for k, v in fields.items() if k in PRODUCT_FIELDS and v is not None})
        r = self.session.put(self._url(f"/inventory/{product_id}"), json=payload, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def delete_product(self, product_id: int):
        r = self.session.delete(self._url(f"/inventory/{product_id}"), timeout=self.timeout)
        r.raise_for_status()

    # Analytics
    def sales_analytics(self, period: str = "week") -> Dict[str, Any]:
        r = self.session.get(self._url("/orders/analytics/sales"), params={"period": period},
                             timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Payments (support lookup)
    def payment_status(self, order_number: str) -> List[Dict[str, Any]]:
        r = self.session.get(self._url(f"/payments/{order_number}"), timeout=self.timeout)
        r.raise_for_status()
        return r.json()


if __name__ == "__main__":
    import argparse
    import os

    parser = argparse.ArgumentParser(description="Quantum Store catalog admin")
    parser.add_argument("--url", default=os.environ.get("STORE_API_URL", "http://127.0.0.1:8080"))
    parser.add_argument("--token", default=os.environ.get("STORE_API_TOKEN"))
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-products", help="List all products")

    gp = subparsers.add_parser("get-product", help="Get a product by SKU")
    gp.add_argument("--sku", required=True)

    def add_product_args(p, required: bool):
        p.add_argument("--sku", required=required, help="SKU code")
        p.add_argument("--name")
        p.add_argument("--brand")
        p.add_argument("--category")
        p.add_argument("--description")
        p.add_argument("--price", type=float)
        p.add_argument("--original-price", type=float)
        p.add_argument("--image-url")
        p.add_argument("--quantity", type=int, required=required)

    cp = subparsers.add_parser("create-product", help="Register a new product")
    add_product_args(cp, required=True)

    up = subparsers.add_parser("update-product", help="Update an existing product")
    up.add_argument("--id", type=int, required=True)
    add_product_args(up, required=False)

    dp = subparsers.add_parser("delete-product", help="Delete a product")
    dp.add_argument("--id", type=int, required=True)

    ps = subparsers.add_parser("payment-status", help="Show payment records for an order number")
    ps.add_argument("--order", required=True)

    sa = subparsers.add_parser("sales", help="Order count and revenue for a period")
    sa.add_argument("--period", choices=["week", "month", "year"], default="week")

    args = parser.parse_args()
    c = AdminClient(base_url=args.url, api_key=args.token)

    if args.command == "list-products":
        print(c.list_products())

    elif args.command == "get-product":
        print(c.get_product(args.sku) or f"No product with SKU '{args.sku}'")

    elif args.command in ("create-product", "update-product"):
        fields = {
            "name": args.name, "brand": args.brand, "category": args.category,
            "description": args.description, "price": args.price,
            "originalPrice": args.original_price, "imageUrl": args.image_url,
        }
        if args.command == "create-product":
            print(c.create_product(args.sku, args.quantity, **fields))
        else:
            print(c.update_product(args.id, skuCode=args.sku, quantity=args.quantity, **fields))

    elif args.command == "delete-product":
        c.delete_product(args.id)
        print(f"Deleted product {args.id}")

    elif args.command == "payment-status":
        print(c.payment_status(args.order))

    elif args.command == "sales":
        print(c.sales_analytics(args.period))
