"""Tests for izi search, list, whoami, logout, and config."""

import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from izi.cli import (
    cmd_auth,
    cmd_config,
    cmd_list,
    cmd_logout,
    cmd_search,
    cmd_whoami,
)
from izi.config import Config, load_config
from izi.models import Prompt, SearchResult, User
from izi.util import ApiError, AuthError, IziError

CONFIG = Config(api_token="tok_1234567890xyz", username="jane")

PROMPTS = [
    Prompt(id=f"p{i}", name=f"Prompt {i}", author="jane",
           created_at="2025-01-15T10:30:00Z", updated_at="2025-01-20T10:30:00Z")
    for i in range(1, 4)
]


def _make_args(**overrides):
    defaults = {"json": False, "verbose": False}
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


@patch("izi.cli.IziClient")
class TestSearch:
    def test_terse(self, mock_cls, capsys):
        mock_cls.return_value.search_prompts.return_value = SearchResult(PROMPTS[:2], 2)
        rc = cmd_search(_make_args(query="code", limit=10), CONFIG)
        assert rc == 0
        mock_cls.return_value.search_prompts.assert_called_once_with("code", limit=10)
        lines = capsys.readouterr().out.strip().split("\n")
        assert lines == ["p1\tPrompt 1\t2025-01-15", "p2\tPrompt 2\t2025-01-15"]

    def test_no_results(self, mock_cls, capsys):
        mock_cls.return_value.search_prompts.return_value = SearchResult([], 0)
        cmd_search(_make_args(query="zzz", limit=10), CONFIG)
        assert "No prompts found" in capsys.readouterr().out

    def test_json(self, mock_cls, capsys):
        mock_cls.return_value.search_prompts.return_value = SearchResult(PROMPTS[:1], 5)
        cmd_search(_make_args(query="x", limit=1, json=True), CONFIG)
        data = json.loads(capsys.readouterr().out)
        assert data["total"] == 5
        assert data["prompts"][0]["id"] == "p1"

    def test_requires_auth(self, mock_cls):
        with pytest.raises(AuthError):
            cmd_search(_make_args(query="x", limit=10), Config())
        mock_cls.assert_not_called()


@patch("izi.cli.IziClient")
class TestList:
    def test_truncates_to_limit(self, mock_cls, capsys):
        mock_cls.return_value.list_user_prompts.return_value = PROMPTS
        cmd_list(_make_args(limit=2), CONFIG)
        captured = capsys.readouterr()
        assert captured.out.strip().split("\n") == [
            "p1\tPrompt 1\t2025-01-20",
            "p2\tPrompt 2\t2025-01-20",
        ]
        assert "Showing 2 of 3 prompts" in captured.err

    def test_empty(self, mock_cls, capsys):
        mock_cls.return_value.list_user_prompts.return_value = []
        cmd_list(_make_args(limit=10), CONFIG)
        assert "haven't created any prompts" in capsys.readouterr().out

    def test_json_reports_total(self, mock_cls, capsys):
        mock_cls.return_value.list_user_prompts.return_value = PROMPTS
        cmd_list(_make_args(limit=1, json=True), CONFIG)
        data = json.loads(capsys.readouterr().out)
        assert data["total"] == 3
        assert len(data["prompts"]) == 1


@patch("izi.cli.IziClient")
class TestWhoami:
    def test_from_server(self, mock_cls, capsys):
        mock_cls.return_value.get_current_user.return_value = User("jane", "j@x.io")
        cmd_whoami(_make_args(verbose=True), CONFIG)
        out = capsys.readouterr().out
        assert out.startswith("jane\n")
        assert "Email: j@x.io" in out

    def test_falls_back_to_cached(self, mock_cls, capsys):
        mock_cls.return_value.get_current_user.side_effect = ApiError(
            "Network error", kind="network"
        )
        cmd_whoami(_make_args(json=True), CONFIG)
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {
            "username": "jane", "email": None, "cached": True,
        }
        assert "showing cached user" in captured.err

    def test_no_cache_reraises(self, mock_cls):
        mock_cls.return_value.get_current_user.side_effect = ApiError("down")
        with pytest.raises(ApiError):
            cmd_whoami(_make_args(), Config(api_token="tok"))


class TestLogout:
    def test_clears_config(self, tmp_path, capsys):
        path = tmp_path / "config.json"
        path.write_text("{}")
        config = Config(api_token="tok", username="jane")
        with patch("izi.config.CONFIG_PATH", path):
            assert cmd_logout(_make_args(), config) == 0
        assert not path.exists()
        assert "OK logged out" in capsys.readouterr().out


class TestConfigCommand:
    def _args(self, action, key=None, value=None, **kw):
        return _make_args(action=action, key=key, value=value, **kw)

    def test_list(self, capsys):
        cmd_config(self._args("list"), CONFIG)
        out = capsys.readouterr().out
        assert "api-url\thttps://gitizi.com/api" in out
        assert "username\tjane" in out
        assert "token\ttok_123456..." in out

    def test_list_json(self, capsys):
        cmd_config(self._args("list", json=True), Config())
        data = json.loads(capsys.readouterr().out)
        assert data == {"api_url": "https://gitizi.com/api", "username": None, "token": None}

    @pytest.mark.parametrize("key", ["api-url", "url", "API_URL", "apiUrl"])
    def test_get_api_url_aliases(self, key, capsys):
        cmd_config(self._args("get", key), CONFIG)
        assert capsys.readouterr().out.strip() == "https://gitizi.com/api"

    def test_get_unset_username(self, capsys):
        cmd_config(self._args("get", "username"), Config())
        assert capsys.readouterr().out.strip() == "(not set)"

    def test_get_token_masked(self, capsys):
        cmd_config(self._args("get", "token"), CONFIG)
        assert capsys.readouterr().out.strip() == "tok_123456..."

    def test_set_api_url(self, tmp_path, capsys):
        path = tmp_path / "config.json"
        config = Config()
        with patch("izi.config.CONFIG_PATH", path):
            cmd_config(self._args("set", "api-url", "http://localhost:3000/api"), config)
        assert load_config(path, env={}).api_url == "http://localhost:3000/api"
        assert "OK api-url set" in capsys.readouterr().out

    def test_set_token_refused(self):
        with pytest.raises(IziError, match="izi auth") as exc:
            cmd_config(self._args("set", "token", "abc"), CONFIG)
        assert exc.value.exit_code == 3

    def test_set_without_value(self):
        with pytest.raises(IziError, match="value is required"):
            cmd_config(self._args("set", "api-url"), CONFIG)

    def test_unknown_key(self):
        with pytest.raises(IziError, match="unknown config key"):
            cmd_config(self._args("get", "color"), CONFIG)

    def test_unknown_action(self):
        with pytest.raises(IziError, match="unknown action"):
            cmd_config(self._args("delete", "url"), CONFIG)

    def test_get_without_key(self):
        with pytest.raises(IziError, match="key is required"):
            cmd_config(self._args("get"), CONFIG)


class TestAuthCommand:
    @patch("izi.auth.authenticate", return_value=User("jane"))
    def test_prints_username(self, mock_auth, capsys):
        config = Config()
        rc = cmd_auth(_make_args(token="tok"), config)
        assert rc == 0
        mock_auth.assert_called_once_with(config, token="tok")
        assert capsys.readouterr().out.strip() == "OK authenticated as jane"

    @patch("izi.auth.authenticate", return_value=None)
    def test_kept_existing_login(self, mock_auth, capsys):
        assert cmd_auth(_make_args(token=None), CONFIG) == 0
        assert capsys.readouterr().out == ""

    @patch("izi.auth.authenticate", return_value=User("jane"))
    def test_json(self, mock_auth, capsys):
        cmd_auth(_make_args(token="tok", json=True), Config())
        assert json.loads(capsys.readouterr().out) == {
            "authenticated": True, "username": "jane",
        }
