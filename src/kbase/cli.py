"""Command-line front end for the knowledge base.

Every command signs in with the supplied credentials, performs one
operation and exits with 0 on success or 1 on a reported failure.
"""

import argparse
import asyncio
import os
from dataclasses import dataclass

from .ai import Assistant, create_client
from .auth import AuthGate, Session
from .config import load_config
from .deletion import DeleteConfirmation
from .errors import CategoryInUseError, KBaseError, NotFoundError
from .logging import JSONLLogger, configure_logger
from .models import Category, KnowledgeItem, Role, new_id
from .query import EntryFilter, Recency, strip_tags
from .store import KnowledgeBase
from .view import DerivedSummary, FilteredEntries


@dataclass
class CLIContext:
    """Everything a command needs, built once per invocation."""

    kb: KnowledgeBase
    session: Session
    assistant: Assistant
    log: JSONLLogger


def _open_context() -> CLIContext:
    """Open the knowledge base and services from the loaded configuration."""
    config = load_config()
    kb = KnowledgeBase.open(config.data_path)
    log = configure_logger(config.log_dir, max_size_mb=config.max_log_size_mb)
    assistant = Assistant(create_client(config.api_key, model=config.model))
    return CLIContext(kb=kb, session=Session(kb), assistant=assistant, log=log)


def _login(ctx: CLIContext, args: argparse.Namespace) -> bool:
    """Sign in with --username/--password or KBASE_USERNAME/KBASE_PASSWORD."""
    username = args.username or os.getenv("KBASE_USERNAME", "")
    password = args.password or os.getenv("KBASE_PASSWORD", "")
    user = ctx.session.login(username, password)
    ctx.log.log_auth("login", username, success=user is not None)
    if user is None:
        print("Error: Invalid username or password.")
        return False
    ctx.log.set_username(user.username)
    return True


def _confirm(prompt: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    try:
        answer = input(f"{prompt} (y/n): ").strip().lower()
    except EOFError:
        return False
    return answer in ("y", "yes")


def _format_entry_row(ctx: CLIContext, entry: KnowledgeItem) -> str:
    category = ctx.kb.categories.name_of(entry.category_id)
    title = entry.title if len(entry.title) <= 40 else entry.title[:37] + "..."
    return (
        f"{entry.id:<34} {title:<40} {category:<24} "
        f"{entry.created_at.strftime('%Y-%m-%d')}"
    )


def cmd_register(ctx: CLIContext, args: argparse.Namespace) -> int:
    """Create an account without signing in."""
    role = Role.ADMIN if args.admin else Role.USER
    gate = AuthGate(ctx.kb)
    try:
        gate.register(args.name, args.new_username, args.new_password, role=role)
    except KBaseError as e:
        ctx.log.log_auth("register", args.new_username, success=False, error=str(e))
        raise
    ctx.log.log_auth("register", args.new_username, success=True)
    print("Registration successful! Please login.")
    return 0


def cmd_whoami(ctx: CLIContext, args: argparse.Namespace) -> int:
    user = ctx.session.require_user()
    print(f"{user.name} ({user.username}) - {user.role.value}")
    return 0


def cmd_list(ctx: CLIContext, args: argparse.Namespace) -> int:
    """List entries matching the search and filters."""
    entry_filter = EntryFilter(
        query=args.search or "",
        category_id=args.category or "",
        recency=Recency(args.recent or ""),
    )
    view = FilteredEntries(ctx.kb.entries.get_all(), entry_filter)
    entries = view.result

    if not entries:
        print("No entries found.")
        return 0

    print(f"\n{'Id':<34} {'Title':<40} {'Category':<24} Created")
    print("-" * 110)
    for entry in entries:
        print(_format_entry_row(ctx, entry))
    print(f"\nTotal: {len(entries)} entr{'y' if len(entries) == 1 else 'ies'}")

    if args.summary:
        summary = DerivedSummary()
        summary.attach(view)
        text = asyncio.run(summary.refresh(ctx.assistant))
        print(f"\nSummary: {text}")
    return 0


def cmd_show(ctx: CLIContext, args: argparse.Namespace) -> int:
    entry = ctx.kb.entries.get(args.id)
    if entry is None:
        raise NotFoundError(f"Entry not found: {args.id}")

    print(f"\n{entry.title}")
    print("-" * 40)
    print(f"Category: {ctx.kb.categories.name_of(entry.category_id)}")
    print(f"Author: {entry.author_name}")
    print(f"Created: {entry.created_at.strftime('%Y-%m-%d %H:%M')}")
    print(f"Views: {entry.views}")
    print()
    print(entry.content if args.raw else strip_tags(entry.content))
    return 0


def cmd_add(ctx: CLIContext, args: argparse.Namespace) -> int:
    """Create an entry (administrators only)."""
    user = ctx.session.require_admin()
    content = args.content or ""
    if args.generate:
        content = asyncio.run(ctx.assistant.generate(args.title))
        if ctx.assistant.is_fallback(content):
            print(f"Error: {strip_tags(content)}")
            return 1

    entry, _ = ctx.kb.create_entry(
        title=args.title,
        content=content,
        author_name=args.author or user.name,
        category_id=args.category,
        new_category_name=args.new_category,
    )
    ctx.log.log_mutation("created", "entry", entry.id, category_id=entry.category_id)
    print(f"Created entry {entry.id}: {entry.title}")
    return 0


def cmd_delete(ctx: CLIContext, args: argparse.Namespace) -> int:
    """Delete an entry after confirmation (administrators only)."""
    deletion = DeleteConfirmation(ctx.kb, ctx.session)
    entry = deletion.request(args.id)

    if not _confirm(f"Delete '{entry.title}'? This cannot be undone.", args.yes):
        deletion.cancel()
        print("Cancelled.")
        return 0

    remaining = deletion.confirm()
    ctx.log.log_mutation("deleted", "entry", entry.id)
    print(f"Deleted entry {entry.id}. {len(remaining)} remaining.")
    return 0


def cmd_categories(ctx: CLIContext, args: argparse.Namespace) -> int:
    """List or manage categories."""
    action = args.action or "list"

    if action == "list":
        categories = ctx.kb.categories.get_all()
        entries = ctx.kb.entries.get_all()
        print(f"\n{'Id':<34} {'Name':<30} Entries")
        print("-" * 72)
        for category in categories:
            count = sum(1 for e in entries if e.category_id == category.id)
            print(f"{category.id:<34} {category.name:<30} {count}")
        return 0

    ctx.session.require_admin()

    if action == "add":
        category = Category(id=new_id(), name=args.name.strip())
        ctx.kb.categories.add(category)
        ctx.log.log_mutation("created", "category", category.id)
        print(f"Created category {category.id}: {category.name}")
        return 0

    if action == "rename":
        if ctx.kb.categories.get(args.id) is None:
            raise NotFoundError(f"Category not found: {args.id}")
        ctx.kb.categories.update(args.id, args.name)
        ctx.log.log_mutation("updated", "category", args.id)
        print(f"Renamed category {args.id} to {args.name.strip()}")
        return 0

    # delete
    if ctx.kb.categories.get(args.id) is None:
        raise NotFoundError(f"Category not found: {args.id}")
    # Checked here too so an in-use category fails before the confirmation prompt.
    in_use = ctx.kb.entries.in_category(args.id)
    if in_use:
        raise CategoryInUseError(args.id, len(in_use))
    if not _confirm("Are you sure you want to delete this category?", args.yes):
        print("Cancelled.")
        return 0
    ctx.kb.delete_category(args.id)
    ctx.log.log_mutation("deleted", "category", args.id)
    print(f"Deleted category {args.id}")
    return 0


def cmd_users(ctx: CLIContext, args: argparse.Namespace) -> int:
    """List or manage users."""
    action = args.action or "list"

    if action == "edit":
        role = Role(args.role) if args.role else None
        ctx.session.update_user(
            args.id,
            name=args.name,
            username=args.new_username,
            password=args.new_password or "",
            role=role,
        )
        ctx.log.log_mutation("updated", "user", args.id)
        print(f"Updated user {args.id}")
        return 0

    ctx.session.require_admin()

    if action == "list":
        print(f"\n{'Id':<34} {'Username':<16} {'Role':<6} Name")
        print("-" * 80)
        for user in ctx.kb.users.get_all():
            print(f"{user.id:<34} {user.username:<16} {user.role.value:<6} {user.name}")
        return 0

    if action == "add":
        role = Role(args.role) if args.role else Role.USER
        AuthGate(ctx.kb).register(args.name, args.new_username, args.new_password, role=role)
        created = ctx.kb.users.find_by_username(args.new_username)
        ctx.log.log_mutation("created", "user", created.id if created else None)
        print(f"Created user {args.new_username}")
        return 0

    # delete
    if ctx.kb.users.get(args.id) is None:
        raise NotFoundError(f"User not found: {args.id}")
    ctx.session.delete_user(args.id)
    ctx.log.log_mutation("deleted", "user", args.id)
    print(f"Deleted user {args.id}")
    return 0


def cmd_color(ctx: CLIContext, args: argparse.Namespace) -> int:
    """Show or set the header color."""
    if args.value is None:
        print(ctx.kb.settings.get_header_color())
        return 0
    ctx.session.require_admin()
    color = ctx.kb.settings.set_header_color(args.value)
    ctx.log.log_mutation("updated", "settings", "headerColor", value=color)
    print(f"Header color set to {color}")
    return 0


def cmd_ask(ctx: CLIContext, args: argparse.Namespace) -> int:
    """Ask the assistant to draft an answer."""
    print(asyncio.run(ctx.assistant.generate(args.question, context=args.context)))
    return 0


def cmd_authors(ctx: CLIContext, args: argparse.Namespace) -> int:
    for name in ctx.kb.authors():
        print(name)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for kbase commands."""
    parser = argparse.ArgumentParser(
        prog="kbase",
        description="Browse and manage the IT knowledge base",
    )
    parser.add_argument("-u", "--username", help="Login username (or KBASE_USERNAME)")
    parser.add_argument("-p", "--password", help="Login password (or KBASE_PASSWORD)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    register_parser = subparsers.add_parser("register", help="Create an account")
    register_parser.add_argument("--name", required=True, help="Display name")
    register_parser.add_argument("--new-username", required=True, help="Login name")
    register_parser.add_argument("--new-password", required=True, help="Password")
    register_parser.add_argument("--admin", action="store_true", help="Administrator account")

    subparsers.add_parser("whoami", help="Show the signed-in user")

    list_parser = subparsers.add_parser("list", help="List entries")
    list_parser.add_argument("-s", "--search", help="Search titles and content")
    list_parser.add_argument("-c", "--category", help="Category id")
    list_parser.add_argument("-r", "--recent", choices=["7", "30"], help="Created in the last N days")
    list_parser.add_argument("--summary", action="store_true", help="Add an AI summary of the results")

    show_parser = subparsers.add_parser("show", help="Show an entry")
    show_parser.add_argument("id", help="Entry id")
    show_parser.add_argument("--raw", action="store_true", help="Print HTML instead of text")

    add_parser = subparsers.add_parser("add", help="Create an entry")
    add_parser.add_argument("--title", required=True)
    content_group = add_parser.add_mutually_exclusive_group(required=True)
    content_group.add_argument("--content", help="HTML content")
    content_group.add_argument("--generate", action="store_true", help="Draft content with AI")
    category_group = add_parser.add_mutually_exclusive_group(required=True)
    category_group.add_argument("--category", help="Existing category id")
    category_group.add_argument("--new-category", help="Create a category with this name")
    add_parser.add_argument("--author", help="Author name (defaults to you)")

    delete_parser = subparsers.add_parser("delete", help="Delete an entry")
    delete_parser.add_argument("id", help="Entry id")
    delete_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    categories_parser = subparsers.add_parser("categories", help="Manage categories")
    category_actions = categories_parser.add_subparsers(dest="action")
    category_actions.add_parser("list", help="List categories")
    cat_add = category_actions.add_parser("add", help="Add a category")
    cat_add.add_argument("name")
    cat_rename = category_actions.add_parser("rename", help="Rename a category")
    cat_rename.add_argument("id")
    cat_rename.add_argument("name")
    cat_delete = category_actions.add_parser("delete", help="Delete an unused category")
    cat_delete.add_argument("id")
    cat_delete.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    users_parser = subparsers.add_parser("users", help="Manage users")
    user_actions = users_parser.add_subparsers(dest="action")
    user_actions.add_parser("list", help="List users")
    user_add = user_actions.add_parser("add", help="Add a user")
    user_add.add_argument("--name", required=True)
    user_add.add_argument("--new-username", required=True)
    user_add.add_argument("--new-password", required=True)
    user_add.add_argument("--role", choices=[r.value for r in Role])
    user_edit = user_actions.add_parser("edit", help="Edit a user")
    user_edit.add_argument("id")
    user_edit.add_argument("--name", required=True)
    user_edit.add_argument("--new-username", required=True)
    user_edit.add_argument("--new-password", help="Leave out to keep the current password")
    user_edit.add_argument("--role", choices=[r.value for r in Role])
    user_delete = user_actions.add_parser("delete", help="Delete a user")
    user_delete.add_argument("id")

    color_parser = subparsers.add_parser("color", help="Show or set the header color")
    color_parser.add_argument("value", nargs="?")

    ask_parser = subparsers.add_parser("ask", help="Ask the AI assistant")
    ask_parser.add_argument("question")
    ask_parser.add_argument("--context", help="Extra context for the answer")

    subparsers.add_parser("authors", help="List known author names")

    return parser


COMMANDS = {
    "register": cmd_register,
    "whoami": cmd_whoami,
    "list": cmd_list,
    "show": cmd_show,
    "add": cmd_add,
    "delete": cmd_delete,
    "categories": cmd_categories,
    "users": cmd_users,
    "color": cmd_color,
    "ask": cmd_ask,
    "authors": cmd_authors,
}


def run_cli(argv: list[str] | None = None) -> int:
    """Run a kbase command.

    Args:
        argv: Command line arguments (without program name).

    Returns:
        Exit code (0 for success).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    ctx = _open_context()
    try:
        if args.command != "register" and not _login(ctx, args):
            return 1
        return COMMANDS[args.command](ctx, args)
    except KBaseError as e:
        ctx.log.log("error", error=str(e), command=args.command)
        print(f"Error: {e}")
        return 1
    finally:
        ctx.kb.close()
