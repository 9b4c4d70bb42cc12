"""Tests for the kbase command-line interface."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from kbase.cli import create_parser, run_cli
from kbase.config import KBaseConfig
from kbase.store import KnowledgeBase

ADMIN = ["-u", "admin", "-p", "123"]
USER = ["-u", "user", "-p", "123"]


@pytest.fixture
def config(tmp_path: Path, monkeypatch) -> KBaseConfig:
    monkeypatch.delenv("KBASE_USERNAME", raising=False)
    monkeypatch.delenv("KBASE_PASSWORD", raising=False)
    return KBaseConfig(data_path=tmp_path / "kbase.db", log_dir=tmp_path / "logs")


@pytest.fixture
def run(config: KBaseConfig):
    """Run the CLI against the temporary configuration."""

    def _run(*argv: str) -> int:
        with patch("kbase.cli.load_config", return_value=config):
            return run_cli(list(argv))

    return _run


def open_kb(config: KBaseConfig) -> KnowledgeBase:
    return KnowledgeBase.open(config.data_path)


def read_events(config: KBaseConfig) -> list[dict]:
    with open(config.log_dir / "logs.jsonl") as f:
        return [json.loads(line) for line in f]


class TestParser:
    def test_no_command_prints_help(self, run, capsys):
        assert run() == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_recent_choices(self):
        args = create_parser().parse_args(["list", "--recent", "30"])
        assert args.recent == "30"
        with pytest.raises(SystemExit):
            create_parser().parse_args(["list", "--recent", "90"])


class TestLogin:
    def test_invalid_credentials(self, run, config, capsys):
        assert run("-u", "admin", "-p", "wrong", "whoami") == 1
        assert "Invalid username or password" in capsys.readouterr().out
        assert read_events(config)[0]["success"] is False

    def test_missing_credentials(self, run, capsys):
        assert run("whoami") == 1
        assert "Please enter both username and password" in capsys.readouterr().out

    def test_credentials_from_environment(self, run, monkeypatch, capsys):
        monkeypatch.setenv("KBASE_USERNAME", "user")
        monkeypatch.setenv("KBASE_PASSWORD", "123")
        assert run("whoami") == 0
        assert "John Doe (user) - USER" in capsys.readouterr().out


class TestRegister:
    def test_register_then_login(self, run, capsys):
        assert run("register", "--name", "Maria", "--new-username", "maria", "--new-password", "pw") == 0
        assert run("-u", "maria", "-p", "pw", "whoami") == 0
        assert "Maria (maria) - USER" in capsys.readouterr().out

    def test_duplicate_username(self, run, capsys):
        assert run("register", "--name", "X", "--new-username", "admin", "--new-password", "pw") == 1
        assert "already exists" in capsys.readouterr().out


class TestEntries:
    def test_list_all(self, run, capsys):
        assert run(*USER, "list") == 0
        out = capsys.readouterr().out
        assert "How to configure VPN" in out
        assert "Printer Setup (Floor 3)" in out
        assert "Total: 2 entries" in out

    def test_list_search(self, run, capsys):
        assert run(*USER, "list", "--search", "vpn") == 0
        out = capsys.readouterr().out
        assert "Printer Setup" not in out
        assert "Total: 1 entry" in out

    def test_list_no_matches(self, run, capsys):
        assert run(*USER, "list", "--category", "4") == 0
        assert "No entries found." in capsys.readouterr().out

    def test_list_summary_without_api_key(self, run, capsys):
        assert run(*USER, "list", "--summary") == 0
        assert "AI Summary is disabled" in capsys.readouterr().out

    def test_show_strips_markup(self, run, capsys):
        assert run(*USER, "show", "102") == 0
        out = capsys.readouterr().out
        assert "Category: Hardware Support" in out
        assert "192.168.1.50" in out
        assert "<strong>" not in out

    def test_show_unknown(self, run, capsys):
        assert run(*USER, "show", "nope") == 1
        assert "Entry not found" in capsys.readouterr().out

    def test_add_as_admin(self, run, config):
        code = run(*ADMIN, "add", "--title", "Reset MFA", "--content", "<p>Call</p>", "--category", "4")
        assert code == 0
        kb = open_kb(config)
        entry = kb.entries.get_all()[0]
        assert entry.title == "Reset MFA"
        assert entry.author_name == "System Administrator"
        kb.close()
        assert read_events(config)[-1]["event"] == "entry_created"

    def test_add_with_new_category(self, run, config):
        code = run(*ADMIN, "add", "--title", "Teams", "--content", "<p>x</p>", "--new-category", "Collab")
        assert code == 0
        kb = open_kb(config)
        assert kb.categories.get_all()[-1].name == "Collab"
        kb.close()

    def test_add_generate_without_api_key(self, run, config, capsys):
        assert run(*ADMIN, "add", "--title", "VPN", "--generate", "--category", "3") == 1
        assert "AI Suggestions are disabled" in capsys.readouterr().out
        kb = open_kb(config)
        assert len(kb.entries.get_all()) == 2
        kb.close()

    def test_add_generate_service_error_creates_nothing(self, run, config, capsys):
        llm = AsyncMock()
        llm.complete.side_effect = RuntimeError("rate limited")
        with patch("kbase.cli.create_client", return_value=llm):
            code = run(*ADMIN, "add", "--title", "VPN", "--generate", "--category", "3")
        assert code == 1
        assert "Error communicating with AI service" in capsys.readouterr().out
        kb = open_kb(config)
        assert [e.id for e in kb.entries.get_all()] == ["101", "102"]
        kb.close()

    def test_add_generate_saves_draft(self, run, config):
        llm = AsyncMock()
        llm.complete.return_value = "<p>Reconnect the VPN client.</p>"
        with patch("kbase.cli.create_client", return_value=llm):
            code = run(*ADMIN, "add", "--title", "VPN", "--generate", "--category", "3")
        assert code == 0
        kb = open_kb(config)
        assert kb.entries.get_all()[0].content == "<p>Reconnect the VPN client.</p>"
        kb.close()

    def test_add_as_user_denied(self, run, config, capsys):
        code = run(*USER, "add", "--title", "T", "--content", "<p>c</p>", "--category", "1")
        assert code == 1
        assert "Access denied" in capsys.readouterr().out
        kb = open_kb(config)
        assert len(kb.entries.get_all()) == 2
        kb.close()

    def test_delete_confirmed(self, run, config):
        with patch("builtins.input", return_value="y"):
            assert run(*ADMIN, "delete", "101") == 0
        kb = open_kb(config)
        assert [e.id for e in kb.entries.get_all()] == ["102"]
        kb.close()

    def test_delete_cancelled(self, run, config, capsys):
        with patch("builtins.input", return_value="n"):
            assert run(*ADMIN, "delete", "101") == 0
        assert "Cancelled." in capsys.readouterr().out
        kb = open_kb(config)
        assert len(kb.entries.get_all()) == 2
        kb.close()

    def test_delete_as_user_denied(self, run, config):
        assert run(*USER, "delete", "101", "--yes") == 1
        kb = open_kb(config)
        assert len(kb.entries.get_all()) == 2
        kb.close()


class TestCategories:
    def test_list_shows_counts(self, run, capsys):
        assert run(*USER, "categories") == 0
        out = capsys.readouterr().out
        assert "Network & Connectivity" in out

    def test_add_and_rename(self, run, config):
        assert run(*ADMIN, "categories", "add", "Email") == 0
        kb = open_kb(config)
        new_id = kb.categories.get_all()[-1].id
        kb.close()

        assert run(*ADMIN, "categories", "rename", new_id, "Mail") == 0
        kb = open_kb(config)
        assert kb.categories.name_of(new_id) == "Mail"
        kb.close()

    def test_delete_in_use_refused(self, run, config, capsys):
        assert run(*ADMIN, "categories", "delete", "3", "--yes") == 1
        assert "Cannot delete category" in capsys.readouterr().out
        kb = open_kb(config)
        assert len(kb.categories.get_all()) == 4
        kb.close()

    def test_delete_in_use_refused_before_prompt(self, run, config):
        with patch("builtins.input") as prompt:
            assert run(*ADMIN, "categories", "delete", "3") == 1
        prompt.assert_not_called()
        kb = open_kb(config)
        assert kb.categories.get("3") is not None
        kb.close()

    def test_delete_unused(self, run, config):
        assert run(*ADMIN, "categories", "delete", "2", "--yes") == 0
        kb = open_kb(config)
        assert [c.id for c in kb.categories.get_all()] == ["1", "3", "4"]
        kb.close()


class TestUsers:
    def test_list_requires_admin(self, run):
        assert run(*USER, "users", "list") == 1
        assert run(*ADMIN, "users", "list") == 0

    def test_admin_cannot_delete_self(self, run, capsys):
        assert run(*ADMIN, "users", "delete", "admin-1") == 1
        assert "cannot delete the account" in capsys.readouterr().out

    def test_self_edit_keeps_password(self, run, capsys):
        assert run(*USER, "users", "edit", "user-1", "--name", "John Q", "--new-username", "user") == 0
        assert run(*USER, "whoami") == 0
        assert "John Q" in capsys.readouterr().out

    def test_add_user(self, run, config):
        code = run(
            *ADMIN, "users", "add", "--name", "Ops", "--new-username", "ops",
            "--new-password", "pw", "--role", "ADMIN",
        )
        assert code == 0
        kb = open_kb(config)
        assert kb.users.find_by_username("ops").is_admin
        kb.close()


class TestMisc:
    def test_color(self, run, capsys):
        assert run(*USER, "color") == 0
        assert "#EC0000" in capsys.readouterr().out
        assert run(*USER, "color", "#000000") == 1
        assert run(*ADMIN, "color", "#003366") == 0
        assert run(*USER, "color") == 0
        assert "#003366" in capsys.readouterr().out

    def test_ask_without_api_key(self, run, capsys):
        assert run(*USER, "ask", "How do I map a drive?") == 0
        assert "AI Suggestions are disabled" in capsys.readouterr().out

    def test_authors(self, run, capsys):
        assert run(*USER, "authors") == 0
        out = capsys.readouterr().out.splitlines()
        assert out == ["HelpDesk", "John Doe", "SysAdmin", "System Administrator"]
