# cli.py: interactive storefront with operator screens
import asyncio
import sys
from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from rich import box

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.styles import Style as PromptStyle

from sdk.admin import AdminClient
from storefront.config import StoreSettings
from storefront.logging_config import setup_logging
from storefront.models import Failed, Product, Submitted
from storefront.storefront import Storefront

console = Console()
prompt_session = PromptSession()

# Custom prompt style for prompt_toolkit
custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def _money(value: Optional[float]) -> str:
    return f"${value:.2f}" if value is not None else "-"


def show_products(products: List[Product], title: str = "📦 Available Catalog"):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("SKU", style="dim", width=12)
    table.add_column("Name", style="bold", width=22)
    table.add_column("Brand", width=12)
    table.add_column("Category", width=14)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Stock", justify="right", width=7)

    for p in products:
        price = _money(p.price)
        if p.original_price and p.price is not None and p.original_price > p.price:
            price = f"{price}\n[dim strike]{_money(p.original_price)}[/dim strike]"
        stock = str(p.quantity) if p.in_stock else "[red]sold out[/red]"
        table.add_row(p.sku, p.name or "N/A", p.brand or "-", p.category or "-", price, stock)
    console.print(table)


def show_cart(store: Storefront):
    title = Text()
    title.append("🛒 Cart - ", style="bold")
    title.append(f"{store.cart.item_count()} Items", style="bold cyan")
    title.append(f" - Total: {_money(store.cart_total())}", style="bold green")

    view = store.cart_view()
    if not view:
        console.print(Panel("No items in cart 🛍️", title=title, style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("Product", style="bold", width=30)
    table.add_column("Qty", justify="right", width=8)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Subtotal", justify="right", width=12)

    for line, product in view:
        if product is None:
            table.add_row(f"[red]Unknown SKU: {line.sku}[/red]", str(line.quantity), "-", "-")
            continue
        subtotal = (product.price or 0) * line.quantity
        table.add_row(product.name or line.sku, str(line.quantity), _money(product.price), _money(subtotal))
    console.print(Panel(table, title=title, border_style="blue"))


def show_status(store: Storefront):
    if store.loading_catalog:
        console.print("[dim]Loading catalog...[/dim]")
    if store.submitting_order:
        console.print("[dim]Processing order...[/dim]")
    if store.status:
        style = "red" if "failed" in store.status.lower() else "green"
        console.print(Panel.fit(f"[{style}]{store.status}[/{style}]", title="Status"))


def show_error(message: str):
    console.print(Panel.fit(f"[red]{message}[/red]", title="Status"))


# ---------------------------
# Operator calls (sync SDK, run off the event loop)
# ---------------------------
async def try_admin(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Runs a blocking AdminClient call in a worker thread so the payment
    poller keeps ticking. Errors become a red status panel.
    """
    try:
        result = await asyncio.to_thread(fn, *args, **kwargs)
    except Exception as e:
        show_error(f"Error: {e}")
        return None
    if success_msg:
        console.print(Panel.fit(f"[green]{success_msg}[/green]", title="Status"))
    return result


# ---------------------------
# Input helpers with autocomplete
# ---------------------------
async def ask(message: str, completer=None, default: str = "") -> str:
    return (await prompt_session.prompt_async(f"{message} ", completer=completer,
                                              style=custom_style, default=default)).strip()


async def ask_int(message: str, default: int = 1) -> int:
    while True:
        raw = await ask(message, default=str(default))
        try:
            return int(raw)
        except ValueError:
            console.print("[red]Please enter a whole number.[/red]")


async def ask_float(message: str, default: Optional[float] = None) -> Optional[float]:
    while True:
        raw = await ask(message, default="" if default is None else str(default))
        if not raw:
            return None
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def sku_completer(store: Storefront):
    words = [p.sku for p in store.snapshot] + [p.name for p in store.snapshot if p.name]
    return WordCompleter(words, ignore_case=True)


def create_header(store: Storefront):
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ Quantum Store",
        f"[bold blue]🛒 {store.cart.item_count()} Items[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Screens
# ---------------------------
def browse(store: Storefront):
    filters = []
    if store.search_text:
        filters.append(f"search '{store.search_text}'")
    if store.category:
        filters.append(f"category '{store.category}'")
    title = "📦 Available Catalog" + (f" ({', '.join(filters)})" if filters else "")
    show_products(store.visible_products(), title=title)


def resolve_sku(store: Storefront, raw: str) -> Optional[str]:
    if store.snapshot.get(raw):
        return raw
    for p in store.snapshot:
        if p.name and p.name.lower() == raw.lower():
            return p.sku
    return None


async def add_to_cart(store: Storefront):
    raw = await ask("SKU or name", completer=sku_completer(store))
    sku = resolve_sku(store, raw)
    product = store.snapshot.get(sku) if sku else None
    if product is None:
        show_error(f"No product '{raw}' in the catalog")
        return
    if not product.in_stock:
        show_error(f"{product.name or sku} is sold out")
        return
    store.add_to_cart(sku)
    show_cart(store)


async def change_quantity(store: Storefront):
    in_cart = WordCompleter([line.sku for line in store.cart.lines()], ignore_case=True)
    sku = await ask("SKU in cart", completer=in_cart)
    if sku not in store.cart:
        show_error(f"'{sku}' is not in the cart")
        return
    delta = await ask_int("Change by (e.g. 1 or -1)", default=-1)
    store.change_quantity(sku, delta)
    show_cart(store)


async def place_order(store: Storefront):
    if store.cart.is_empty():
        console.print("[italic yellow]No items in cart[/italic yellow]")
        return
    with console.status("Processing..."):
        result = await store.place_order()
    if isinstance(result, Submitted):
        console.print(Panel.fit(
            f"[green]Order placed successfully![/green]\n"
            f"Order Number: [bold]{result.order_number}[/bold]\n"
            f"Lines: [bold]{len(result.lines)}[/bold]\n"
            f"[dim]Waiting for payment confirmation...[/dim]",
            title="✅ Order Confirmation"
        ))
    elif isinstance(result, Failed):
        console.print(Panel.fit(
            f"[red]Order failed:[/red] {result.reason}\n"
            f"Accepted lines: {', '.join(l.sku for l in result.accepted) or 'none'}\n"
            f"Not submitted: {', '.join(l.sku for l in result.remaining)}",
            title="❌ Order Failed"
        ))


async def retry_order(store: Storefront):
    if store.last_failure is None:
        console.print("[italic yellow]Nothing to retry[/italic yellow]")
        return
    with console.status("Retrying..."):
        await store.retry_failed()
    show_status(store)


async def manage_catalog(store: Storefront, admin: AdminClient):
    console.print("[bold]Operator:[/bold] [cyan]a[/cyan]dd, [cyan]e[/cyan]dit, [cyan]d[/cyan]elete, [cyan]b[/cyan]ack")
    action = (await ask("Action", completer=WordCompleter(["a", "e", "d", "b"]))).lower()

    if action == "a":
        sku = await ask("SKU code")
        name = await ask("Product name")
        price = await ask_float("Price ($)", default=10.0)
        original = await ask_float("Original price ($, blank for none)")
        brand = await ask("Brand")
        category = await ask("Category")
        qty = await ask_int("Stock quantity", default=0)
        await try_admin(admin.create_product, sku, qty, name=name, price=price,
                        originalPrice=original, brand=brand or None, category=category or None,
                        success_msg=f"Product '{sku}' added")
    elif action == "e":
        sku = await ask("SKU to edit", completer=sku_completer(store))
        product = store.snapshot.get(sku)
        if product is None:
            show_error(f"No product '{sku}' in the catalog")
            return
        price = await ask_float("Price ($)", default=product.price)
        qty = await ask_int("Stock quantity", default=product.quantity)
        await try_admin(admin.update_product, product.id, price=price, quantity=qty,
                        success_msg=f"Product '{sku}' updated")
    elif action == "d":
        sku = await ask("SKU to delete", completer=sku_completer(store))
        product = store.snapshot.get(sku)
        if product is None:
            show_error(f"No product '{sku}' in the catalog")
            return
        if (await ask("Are you sure? (y/n)", default="n")).lower() != "y":
            return
        await try_admin(admin.delete_product, product.id, success_msg=f"Product '{sku}' deleted")
    else:
        return
    await store.load()


async def show_sales(admin: AdminClient):
    table = Table(title="📈 Sales analytics", show_header=True, header_style="bold magenta")
    table.add_column("Period", style="cyan")
    table.add_column("Orders", justify="right")
    table.add_column("Revenue", justify="right", style="green")
    for period in ("week", "month", "year"):
        stats = await try_admin(admin.sales_analytics, period)
        if stats is None:
            return
        table.add_row(period.title(), str(stats["count"]), _money(stats["revenue"]))
    console.print(table)


# ---------------------------
# Main menu
# ---------------------------
async def menu(settings: StoreSettings):
    admin = AdminClient(base_url=settings.api_url, api_key=settings.api_token,
                        timeout=int(settings.http_timeout))

    async with Storefront.open(settings.session(), settings) as store:
        console.clear()
        console.print(create_header(store))
        with console.status("Loading catalog..."):
            if not await store.load():
                show_error("Catalog unavailable, showing cached data")

        while True:
            show_status(store)

            menu_table = Table.grid(padding=(0, 2))
            menu_table.add_column("Key", style="bold cyan", width=4)
            menu_table.add_column("Option", width=30)
            menu_table.add_column("Key", style="bold cyan", width=4)
            menu_table.add_column("Option", width=30)

            options = [
                ("1", "📦 Browse catalog", "6", "✅ Place order"),
                ("2", "🔍 Search", "7", "🔁 Retry failed lines"),
                ("3", "🏷️ Filter by category", "8", "🔄 Refresh catalog"),
                ("4", "🛒 Add to cart", "9", "🛠️ Manage catalog"),
                ("5", "➖ Change quantity / view cart", "10", "📈 Sales analytics"),
                ("", "", "q", "👋 Quit"),
            ]
            for row in options:
                menu_table.add_row(*row)
            console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

            choice = await ask(
                "\nChoose an option",
                completer=WordCompleter([str(i) for i in range(1, 11)] + ["q", "quit", "exit"])
            )

            if choice == "1":
                browse(store)

            elif choice == "2":
                store.search_text = await ask("Search term (blank clears)", default=store.search_text)
                browse(store)

            elif choice == "3":
                cats = store.categories()
                console.print(f"[dim]Categories: {', '.join(cats) or 'none'}[/dim]")
                store.category = await ask("Category (blank for all)",
                                           completer=WordCompleter(cats), default=store.category)
                browse(store)

            elif choice == "4":
                await add_to_cart(store)

            elif choice == "5":
                show_cart(store)
                if not store.cart.is_empty():
                    await change_quantity(store)

            elif choice == "6":
                await place_order(store)

            elif choice == "7":
                await retry_order(store)

            elif choice == "8":
                with console.status("Loading catalog..."):
                    ok = await store.load()
                if ok:
                    browse(store)
                else:
                    show_error("Catalog refresh failed, showing cached data")

            elif choice == "9":
                await manage_catalog(store, admin)

            elif choice == "10":
                await show_sales(admin)

            elif choice.lower() in ("q", "quit", "exit"):
                console.print(Panel.fit("[bold green]Thank you for shopping at Quantum Store! 👋[/bold green]", title="Goodbye"))
                return

            console.print()
            console.rule(style="dim")


async def main():
    settings = StoreSettings.from_env()
    setup_logging(settings.log_level, settings.log_file, console=console)
    with patch_stdout():
        await menu(settings)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
