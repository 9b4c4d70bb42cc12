"""Storage keys and the default records written on first start."""

from datetime import datetime, timedelta

from ..models import Category, KnowledgeItem, Role, User, utc_now

USERS_KEY = "santander_kb_users_v1"
CATEGORIES_KEY = "santander_kb_categories_v1"
ENTRIES_KEY = "santander_kb_entries_v1"
HEADER_COLOR_KEY = "santander_kb_header_color_v1"

DEFAULT_HEADER_COLOR = "#EC0000"


def seed_users() -> list[User]:
    return [
        User(
            id="admin-1",
            name="System Administrator",
            username="admin",
            password="123",
            role=Role.ADMIN,
        ),
        User(
            id="user-1",
            name="John Doe",
            username="user",
            password="123",
            role=Role.USER,
        ),
    ]


def seed_categories() -> list[Category]:
    return [
        Category(id="1", name="Hardware Support"),
        Category(id="2", name="Software Installation"),
        Category(id="3", name="Network & Connectivity"),
        Category(id="4", name="Security Policies"),
    ]


def seed_entries(now: datetime | None = None) -> list[KnowledgeItem]:
    now = now or utc_now()
    return [
        KnowledgeItem(
            id="101",
            title="How to configure VPN for remote access",
            content=(
                "<ol><li>Open Cisco AnyConnect.</li>"
                "<li>Enter the gateway address: <strong>vpn.santander.com</strong></li>"
                "<li>Use your corporate credentials.</li>"
                "<li>Approve the MFA request via the authenticator app.</li></ol>"
                "<p>If you encounter connection issues, ensure your network "
                "password has not expired.</p>"
            ),
            category_id="3",
            author_name="SysAdmin",
            created_at=now - timedelta(days=2),
            views=124,
        ),
        KnowledgeItem(
            id="102",
            title="Printer Setup (Floor 3)",
            content=(
                "<p>The printer on Floor 3 IP address is <strong>192.168.1.50</strong>.</p>"
                "<p>To install:</p><ul><li>Open File Explorer.</li>"
                "<li>Navigate to <code>\\\\printserv\\floor3</code>.</li>"
                "<li>Double click the printer icon to install drivers automatically.</li></ul>"
            ),
            category_id="1",
            author_name="HelpDesk",
            created_at=now - timedelta(days=5),
            views=45,
        ),
    ]
