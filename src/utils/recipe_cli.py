"""
Recipe CLI Utility

Command-line interface for the paste workflow and the ingredient store.
No UI required - designed for scripting and testing use.

Usage Examples:
    # Split pasted instructions into steps (with time estimates)
    chopchop parse-instructions instructions.txt

    # Parse an ingredient list; "-" reads stdin
    pbpaste | chopchop parse-ingredients -

    # Show a recipe file as a cooking plan, checking the ingredient store
    chopchop plan pancakes.txt --check-stock

    # Add a batch to the ingredient store
    chopchop stock-add flour "1.5 kg" --expires 2026-03-01

    # Use some of an ingredient
    chopchop stock-use flour "2 cups"

    # List the ingredient store
    chopchop stock-list

Recipe files for "plan" hold an ingredient section and an instruction
section, each introduced by a header line:

    Ingredients:
    2 cups flour
    3 eggs

    Instructions:
    1. Mix everything.
    2. Bake for 25 minutes.
"""

import argparse
import json
import logging
import re
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

from src.services.exceptions import ServiceError
from src.utils import datetime_utils

logger = logging.getLogger(__name__)

_SECTION_HEADER = re.compile(
    r"^\s*(?P<section>ingredients|instructions|directions|method|steps)\s*:?\s*$",
    re.IGNORECASE,
)
_INSTRUCTION_SECTIONS = ("instructions", "directions", "method", "steps")


def format_duration(seconds: int) -> str:
    """Render seconds as e.g. '1h 05m', '25m', '30s'."""
    if seconds <= 0:
        return "-"
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes:
        return f"{minutes}m" if not secs else f"{minutes}m {secs:02d}s"
    return f"{secs}s"


def read_text(path: str) -> str:
    """Read a file, or stdin when path is '-'."""
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def split_recipe_sections(text: str) -> Tuple[str, str]:
    """
    Split recipe file text into (ingredient text, instruction text).

    Lines before any header are treated as ingredients.
    """
    ingredients: List[str] = []
    instructions: List[str] = []
    current = ingredients
    for line in text.splitlines():
        header = _SECTION_HEADER.match(line)
        if header:
            section = header.group("section").lower()
            current = instructions if section in _INSTRUCTION_SECTIONS else ingredients
            continue
        current.append(line)
    return "\n".join(ingredients), "\n".join(instructions)


# ============================================================================
# Parsing commands
# ============================================================================


def parse_instructions_cmd(path: str) -> int:
    """Print the steps parsed from an instruction file."""
    from src.services.recipe_parser import parse_instructions
    from src.services.step_time_parser import parse_time_taken

    steps = parse_instructions(read_text(path))
    if not steps:
        print("No steps found")
        return 1

    for index, step in enumerate(steps, start=1):
        print(f"{index:>3}. [{format_duration(parse_time_taken(step)):>7}] {step}")
    return 0


def parse_ingredients_cmd(path: str) -> int:
    """Print the ingredients parsed from an ingredient list file."""
    from src.services.recipe_parser import parse_ingredient_list

    ingredients = parse_ingredient_list(read_text(path))
    if not ingredients:
        print("No ingredients found")
        return 1

    width = max(len(name) for name in ingredients)
    for name, quantity in ingredients.items():
        print(f"{name:<{width}}  {quantity}")
    return 0


def plan_cmd(path: str, name: Optional[str], servings: float, check_stock: bool) -> int:
    """Print a recipe file as an ordered cooking plan."""
    from src.services.cooking_session_service import (
        build_recipe_from_text,
        deductible_ingredients,
    )

    ingredient_text, instruction_text = split_recipe_sections(read_text(path))
    recipe_name = name or (Path(path).stem if path != "-" else "Recipe")
    try:
        recipe = build_recipe_from_text(
            recipe_name, ingredient_text, instruction_text, servings=servings
        )
    except ServiceError as e:
        print(f"ERROR: {e}")
        return 1

    print(f"{recipe.name} (serves {recipe.servings:g})")
    print(f"Estimated time: {format_duration(recipe.total_time_taken)}")

    print("\nIngredients:")
    stock = {}
    if check_stock:
        from src.services import ingredient_service

        for deduction in deductible_ingredients(recipe):
            try:
                enough = ingredient_service.contains(deduction.ingredient_name, deduction.quantity)
            except ServiceError:
                enough = False
            stock[deduction.recipe_ingredient.name] = "in stock" if enough else "not enough"
    for ingredient in recipe.ingredients:
        status = f"  [{stock.get(ingredient.name, 'not stocked')}]" if check_stock else ""
        print(f"  - {ingredient.name}: {ingredient.quantity}{status}")

    print("\nSteps:")
    for index, node in enumerate(recipe.step_graph.topologically_sorted_nodes, start=1):
        print(f"  {index:>2}. [{format_duration(node.time_taken):>7}] {node.step.content}")
    return 0


# ============================================================================
# Ingredient store commands
# ============================================================================


def _parse_amount_arg(amount: str):
    from src.services.recipe_parser import parse_amount

    quantity = parse_amount(amount)
    if quantity is None:
        print(f"ERROR: Cannot read amount '{amount}' (try e.g. '2', '500 g', '1 1/2 cups')")
    return quantity


def stock_add_cmd(name: str, amount: str, expires: Optional[date]) -> int:
    """Add a batch, creating the ingredient on first use."""
    from src.services import ingredient_service
    from src.services.exceptions import IngredientNotFound

    quantity = _parse_amount_arg(amount)
    if quantity is None:
        return 1

    try:
        try:
            ingredient_service.get_ingredient(name)
        except IngredientNotFound:
            ingredient_service.create_ingredient(name, quantity.type)
            print(f"Created ingredient '{name.strip()}' ({quantity.type.value})")
        ingredient_service.add_batch(name, quantity, expiry_date=expires)
        total = ingredient_service.get_total_quantity(name)
    except ServiceError as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Added {quantity} of {name.strip()} (total {total})")
    return 0


def stock_use_cmd(name: str, amount: str) -> int:
    """Use some of an ingredient, earliest expiry first."""
    from src.services import ingredient_service

    quantity = _parse_amount_arg(amount)
    if quantity is None:
        return 1

    try:
        result = ingredient_service.use(name, quantity)
        total = ingredient_service.get_total_quantity(name)
    except ServiceError as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Used {result['consumed']} of {name.strip()} (remaining {total})")
    return 0


def stock_list_cmd(include_batches: bool, as_json: bool = False) -> int:
    """Print every ingredient in the store with its total."""
    from src.models.quantity import Quantity
    from src.services import ingredient_service

    ingredients = ingredient_service.list_ingredients()
    if as_json:
        records = [
            ingredient.to_dict(include_relationships=include_batches) for ingredient in ingredients
        ]
        print(json.dumps(records, indent=2))
        return 0
    if not ingredients:
        print("Ingredient store is empty")
        return 0

    today = datetime_utils.today()
    for ingredient in ingredients:
        print(f"{ingredient.name}: {ingredient.total_quantity}")
        if not include_batches:
            continue
        for batch in ingredient.sorted_batches():
            expiry = batch.expiry_date.isoformat() if batch.expiry_date else "no expiry"
            flag = " (expired)" if batch.is_expired(today) else ""
            print(f"    {Quantity(ingredient.quantity_type, batch.quantity)}  {expiry}{flag}")
    return 0


def stock_remove_expired_cmd() -> int:
    from src.services import ingredient_service

    removed = ingredient_service.remove_expired_batches()
    print(f"Removed {removed} expired batch(es)")
    return 0


# ============================================================================
# Entry point
# ============================================================================


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}' (expected YYYY-MM-DD)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chopchop",
        description="Recipe parsing and ingredient store utility for ChopChop",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Split pasted instructions into steps:
    chopchop parse-instructions instructions.txt

  Parse an ingredient list from stdin:
    chopchop parse-ingredients -

  Show a recipe as a cooking plan:
    chopchop plan pancakes.txt --servings 4 --check-stock

  Manage the ingredient store:
    chopchop stock-add eggs 12 --expires 2026-11-02
    chopchop stock-use eggs 3
    chopchop stock-list --batches
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    instructions_parser = subparsers.add_parser(
        "parse-instructions", help="Split instruction text into steps"
    )
    instructions_parser.add_argument("file", help="Text file path ('-' for stdin)")

    ingredients_parser = subparsers.add_parser(
        "parse-ingredients", help="Parse an ingredient list into quantities"
    )
    ingredients_parser.add_argument("file", help="Text file path ('-' for stdin)")

    plan_parser = subparsers.add_parser("plan", help="Show a recipe file as a cooking plan")
    plan_parser.add_argument("file", help="Recipe file path ('-' for stdin)")
    plan_parser.add_argument("--name", help="Recipe name (default: file name)")
    plan_parser.add_argument("--servings", type=float, default=1, help="Servings (default: 1)")
    plan_parser.add_argument(
        "--check-stock",
        action="store_true",
        help="Check each ingredient against the ingredient store",
    )

    add_parser = subparsers.add_parser("stock-add", help="Add a batch to the ingredient store")
    add_parser.add_argument("name", help="Ingredient name")
    add_parser.add_argument("amount", help="Amount, e.g. '12', '500 g', '1 1/2 cups'")
    add_parser.add_argument("--expires", type=_iso_date, help="Expiry date (YYYY-MM-DD)")

    use_parser = subparsers.add_parser("stock-use", help="Use some of an ingredient")
    use_parser.add_argument("name", help="Ingredient name")
    use_parser.add_argument("amount", help="Amount, e.g. '3', '200 g'")

    list_parser = subparsers.add_parser("stock-list", help="List the ingredient store")
    list_parser.add_argument("--batches", action="store_true", help="Show individual batches")
    list_parser.add_argument("--json", action="store_true", help="Print the store as JSON")

    subparsers.add_parser("stock-remove-expired", help="Delete expired batches")

    return parser


STORE_COMMANDS = ("stock-add", "stock-use", "stock-list", "stock-remove-expired")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug(f"Running command: {args.command}")

    if args.command is None:
        parser.print_help()
        return 1

    # Only commands touching the ingredient store need the database
    if args.command in STORE_COMMANDS or (args.command == "plan" and args.check_stock):
        from src.services.database import initialize_app_database

        initialize_app_database()

    try:
        if args.command == "parse-instructions":
            return parse_instructions_cmd(args.file)
        elif args.command == "parse-ingredients":
            return parse_ingredients_cmd(args.file)
        elif args.command == "plan":
            return plan_cmd(args.file, args.name, args.servings, args.check_stock)
        elif args.command == "stock-add":
            return stock_add_cmd(args.name, args.amount, args.expires)
        elif args.command == "stock-use":
            return stock_use_cmd(args.name, args.amount)
        elif args.command == "stock-list":
            return stock_list_cmd(args.batches, args.json)
        elif args.command == "stock-remove-expired":
            return stock_remove_expired_cmd()
        else:
            print(f"Unknown command: {args.command}")
            return 1
    except OSError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
