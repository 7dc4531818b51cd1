# cli.py
import os
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.client import ServiceClient

console = Console()
c = ServiceClient(
    product_url=os.getenv("PRODUCT_SERVICE_URL", "http://localhost:3001"),
    user_url=os.getenv("USER_SERVICE_URL", "http://localhost:3002"),
)

# Global state for status messages and autocomplete caches
status_message = "Ready"
product_cache: List[Dict[str, Any]] = []
user_cache: List[Dict[str, Any]] = []

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="📦 Product Catalog",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=26)
    table.add_column("Name", style="bold", width=20)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Category", width=15)
    table.add_column("In stock", justify="center", width=9)

    for p in products:
        stocked = "[green]yes[/green]" if p.get("inStock", True) else "[red]no[/red]"
        table.add_row(
            p.get("_id", "N/A"),
            p.get("name", "N/A"),
            f"${p.get('price', 0):.2f}",
            p.get("category", "N/A"),
            stocked,
        )
    console.print(table)


def show_product_detail(p: Dict[str, Any]):
    show_products([p])
    if p.get("description"):
        console.print(Panel(p["description"], title="Description", border_style="cyan"))


def show_users(users: List[Dict[str, Any]]):
    if not users:
        console.print("[italic yellow]No users found[/italic yellow]")
        return

    table = Table(title="👥 Users", box=box.ROUNDED, header_style="bold yellow", title_style="bold yellow")
    table.add_column("ID", style="dim", width=26)
    table.add_column("Name", style="bold", width=24)
    table.add_column("Email", width=30)
    for u in users:
        table.add_row(u.get("_id", "N/A"), u.get("name", "N/A"), u.get("email", "N/A"))
    console.print(table)


def show_health(results: List[Dict[str, Any]]):
    table = Table(title="🩺 Services", box=box.ROUNDED, header_style="bold green")
    table.add_column("Service", width=18)
    table.add_column("Status", width=10)
    table.add_column("Timestamp", style="dim", width=34)
    for h in results:
        style = "green" if h.get("status") == "healthy" else "red"
        table.add_row(h.get("service", "?"), f"[{style}]{h.get('status', 'down')}[/{style}]", h.get("timestamp", "-"))
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner. Returns the decoded result,
    or None after printing the error.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except Exception as e:
        status_message = f"Error: {e}"
        console.print(show_status(f"Error: {e}", False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def refresh_caches():
    global product_cache, user_cache
    product_cache = try_api(c.list_products) or []
    user_cache = try_api(c.list_users) or []


def get_product_completer():
    return WordCompleter([p["_id"] for p in product_cache if p.get("_id")], ignore_case=True)


def get_category_completer():
    categories = sorted({p.get("category", "") for p in product_cache if p.get("category")})
    return WordCompleter(categories, ignore_case=True)


def get_user_completer():
    return WordCompleter([u["_id"] for u in user_cache if u.get("_id")], ignore_case=True)


# ---------------------------
# Input helpers
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 10.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def ask_stock_filter() -> Optional[bool]:
    answer = Prompt.ask("In stock only?", choices=["any", "yes", "no"], default="any")
    return None if answer == "any" else answer == "yes"


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ Catalog SDK",
        "[bold blue]Products & Users Console[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message, product_cache, user_cache

    console.clear()
    console.print(create_header())
    refresh_caches()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "6", "👥 List users"),
            ("2", "➕ Add product", "7", "🙋 Register user"),
            ("3", "ℹ️ Show product", "8", "🔎 Show user"),
            ("4", "💲 Change price", "9", "🩺 Service health"),
            ("5", "📦 Toggle stock", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 10)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            category = prompt_with_autocomplete("Category (blank for all)", completer=get_category_completer()).strip()
            in_stock = ask_stock_filter()
            products = try_api(c.list_products, category or None, in_stock, success_msg="Products loaded")
            if products is not None:
                show_products(products)

        elif choice == "2":
            name = prompt_with_autocomplete("Product name")
            description = prompt_with_autocomplete("Description")
            price = ask_float("💰 Price", default=10.0)
            category = prompt_with_autocomplete("🏷️ Category", completer=get_category_completer())
            in_stock = Confirm.ask("In stock?", default=True)
            resp = try_api(
                c.create_product, name, description, price, category, in_stock,
                success_msg=f"Product '{name}' created"
            )
            if resp:
                show_product_detail(resp)
                refresh_caches()

        elif choice == "3":
            pid = prompt_with_autocomplete("Product ID", completer=get_product_completer()).strip()
            resp = try_api(c.get_product, pid)
            if resp:
                show_product_detail(resp)

        elif choice == "4":
            pid = prompt_with_autocomplete("Product ID", completer=get_product_completer()).strip()
            price = ask_float("New price", default=10.0)
            resp = try_api(c.update_product, pid, price=price, success_msg=f"Price updated to ${price:.2f}")
            if resp:
                show_products([resp])
                refresh_caches()

        elif choice == "5":
            pid = prompt_with_autocomplete("Product ID", completer=get_product_completer()).strip()
            current = try_api(c.get_product, pid)
            if current:
                flipped = not current.get("inStock", True)
                resp = try_api(c.update_product, pid, in_stock=flipped, success_msg="Stock flag updated")
                if resp:
                    show_products([resp])
                    refresh_caches()

        elif choice == "6":
            email = Prompt.ask("Email filter (blank for all)", default="").strip()
            users = try_api(c.list_users, email or None, success_msg="Users loaded")
            if users is not None:
                show_users(users)

        elif choice == "7":
            name = prompt_with_autocomplete("Full name")
            email = prompt_with_autocomplete("Email")
            resp = try_api(c.create_user, name, email, success_msg=f"User {email} registered")
            if resp:
                show_users([resp])
                refresh_caches()

        elif choice == "8":
            uid = prompt_with_autocomplete("User ID", completer=get_user_completer()).strip()
            resp = try_api(c.get_user, uid)
            if resp:
                show_users([resp])

        elif choice == "9":
            results = []
            for service in ("product-service", "user-service"):
                h = try_api(c.health, service)
                results.append(h or {"service": service, "status": "down"})
            show_health(results)

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Bye! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
