"""Tests for CLI tools: user_admin and server."""

import os
import sys

import pytest
from jose import jwt

from rollcall.cli import server
from rollcall.cli.user_admin import add_user, issue_token, list_users, remove_user, set_active
from rollcall.config import settings
from rollcall.models.user import User, UserRole
from rollcall.services.auth import ALGORITHM


class TestUserAdmin:
    """Tests for user_admin CLI functions."""

    @pytest.mark.asyncio
    async def test_add_user(self, init_test_db):
        await add_user("newuser@example.com", "New User", UserRole.CELL_LEADER, phone="555-0100")

        user = await User.find_one(User.email == "newuser@example.com")
        assert user is not None
        assert user.role == UserRole.CELL_LEADER
        assert user.phone == "555-0100"
        assert user.is_active is True

    @pytest.mark.asyncio
    async def test_add_duplicate_user_fails(self, init_test_db):
        await add_user("dup@example.com", "Dup", UserRole.CELL_LEADER)
        with pytest.raises(SystemExit):
            await add_user("dup@example.com", "Dup", UserRole.SUPER_ADMIN)

    @pytest.mark.asyncio
    async def test_list_users(self, init_test_db, capsys):
        await add_user("b@example.com", "Bee", UserRole.CELL_LEADER)
        await add_user("a@example.com", "Ay", UserRole.SUPER_ADMIN)
        capsys.readouterr()

        await list_users()
        output = capsys.readouterr().out
        assert output.index("a@example.com") < output.index("b@example.com")
        assert "super_admin" in output

    @pytest.mark.asyncio
    async def test_disable_and_enable(self, init_test_db):
        await add_user("toggle@example.com", "Toggle", UserRole.CELL_LEADER)

        await set_active("toggle@example.com", False)
        assert (await User.find_one(User.email == "toggle@example.com")).is_active is False

        await set_active("toggle@example.com", True)
        assert (await User.find_one(User.email == "toggle@example.com")).is_active is True

    @pytest.mark.asyncio
    async def test_remove_user_with_force(self, init_test_db):
        await add_user("gone@example.com", "Gone", UserRole.CELL_LEADER)
        await remove_user("gone@example.com", force=True)
        assert await User.find_one(User.email == "gone@example.com") is None

    @pytest.mark.asyncio
    async def test_remove_unknown_user_fails(self, init_test_db):
        with pytest.raises(SystemExit):
            await remove_user("nobody@example.com", force=True)

    @pytest.mark.asyncio
    async def test_issue_token(self, init_test_db, capsys):
        await add_user("tok@example.com", "Tok", UserRole.CELL_LEADER)
        capsys.readouterr()

        await issue_token("tok@example.com", minutes=5)
        token = capsys.readouterr().out.strip()
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
        assert payload["sub"] == "tok@example.com"

    @pytest.mark.asyncio
    async def test_issue_token_for_disabled_user_fails(self, init_test_db):
        await add_user("off@example.com", "Off", UserRole.CELL_LEADER)
        await set_active("off@example.com", False)
        with pytest.raises(SystemExit):
            await issue_token("off@example.com", minutes=5)


class TestServer:
    """Tests for the server control helpers."""

    def test_build_command(self):
        cmd = server.build_command("127.0.0.1", 9000, reload=True)
        assert cmd[:4] == [sys.executable, "-m", "uvicorn", "rollcall.main:app"]
        assert cmd[cmd.index("--port") + 1] == "9000"
        assert "--reload" in cmd
        assert "--workers" not in cmd

    def test_read_pid_without_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr(server, "PID_FILE", tmp_path / "rollcall.pid")
        assert server.read_pid() is None

    def test_read_pid_for_live_process(self, tmp_path, monkeypatch):
        pid_file = tmp_path / "rollcall.pid"
        pid_file.write_text(str(os.getpid()))
        monkeypatch.setattr(server, "PID_FILE", pid_file)
        assert server.read_pid() == os.getpid()

    def test_read_pid_clears_garbage_file(self, tmp_path, monkeypatch):
        pid_file = tmp_path / "rollcall.pid"
        pid_file.write_text("not-a-pid")
        monkeypatch.setattr(server, "PID_FILE", pid_file)

        assert server.read_pid() is None
        assert not pid_file.exists()
