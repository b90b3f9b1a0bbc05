"""Tests for the CLI entry point."""

import base64
import json
import os
import types
from unittest.mock import MagicMock

from click.testing import CliRunner
from github import GithubException
from rich.console import Console

from codelens_cli.cli import _build_store, main
from codelens_store.history import HISTORY_KEY
from codelens_store.memory import MemoryStore
from codelens_store.models import new_history_item
from codelens_store.sqlite import SQLiteStore


def _make_config(model="anthropic", anthropic_key="ant", openai_key=None, mode="comprehensive"):
    return {
        "github_token": None,
        "model": model,
        "model_name": None,
        "mode": mode,
        "default_language": "typescript",
        "instructions": None,
        "exclude_dirs": ["node_modules", "dist", ".git", "build"],
        "store": "memory",
        "store_path": ".codelens.db",
        "max_workers": 4,
        "anthropic_api_key": anthropic_key,
        "openai_api_key": openai_key,
    }


def _patch_common(mocker, config=None, responses=("## Review\nGreat code.",)):
    """Patch config, token, store and provider for most tests."""
    cfg = config or _make_config()
    for module in (
        "codelens_core.reviewer",
        "codelens_cli.commands.review",
        "codelens_cli.commands.history",
        "codelens_cli.commands.modes",
    ):
        mocker.patch(f"{module}.console", Console(width=200))
    mocker.patch("codelens_core.config.load_config", return_value=cfg)
    mocker.patch("codelens_cli.auth.resolve_github_token", return_value=None)
    store = MemoryStore()
    mocker.patch("codelens_cli.cli._build_store", return_value=store)
    provider = MagicMock()
    provider.complete.side_effect = list(responses)
    mocker.patch("codelens_cli.commands.review.get_provider", return_value=provider)
    return store, provider


def _history(store):
    raw = store.get(HISTORY_KEY)
    return json.loads(raw) if raw else []


def _content(text):
    return types.SimpleNamespace(content=base64.b64encode(text.encode()).decode(), encoding="base64")


def _mock_repo(contents):
    repo = MagicMock()
    repo.full_name = "acme/widgets"
    repo.default_branch = "main"
    repo.get_git_tree.return_value = types.SimpleNamespace(
        tree=[types.SimpleNamespace(path=p, type="blob", sha="0" * 40) for p in contents]
    )

    def get_contents(path):
        value = contents[path]
        if isinstance(value, Exception):
            raise value
        return value

    repo.get_contents.side_effect = get_contents
    return repo


class TestCLIValidation:
    def test_missing_anthropic_key(self, mocker):
        _patch_common(mocker, config=_make_config(anthropic_key=None))
        result = CliRunner().invoke(main, ["review", "--file", "-"], input="x = 1")
        assert result.exit_code != 0
        assert "ANTHROPIC_API_KEY" in result.output

    def test_missing_openai_key(self, mocker):
        _patch_common(mocker, config=_make_config(model="openai"))
        result = CliRunner().invoke(main, ["review", "--file", "-"], input="x = 1")
        assert result.exit_code != 0
        assert "OPENAI_API_KEY" in result.output

    def test_requires_exactly_one_source(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["review"])
        assert result.exit_code != 0
        assert "exactly one source" in result.output

        result = CliRunner().invoke(main, ["review", "--repo", "https://github.com/a/b", "--file", "-"], input="x")
        assert result.exit_code != 0

    def test_whole_repo_requires_repo(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["review", "--file", "-", "--whole-repo"], input="x")
        assert result.exit_code != 0
        assert "--whole-repo requires --repo" in result.output

    def test_unknown_model_provider(self, mocker):
        _, provider = _patch_common(mocker, config=_make_config(model="gemini"))
        result = CliRunner().invoke(main, ["review", "--file", "-"], input="x = 1")
        assert result.exit_code != 0
        assert "Unknown model provider: 'gemini'" in result.output
        assert "Traceback" not in result.output
        provider.complete.assert_not_called()

    def test_path_rejected_with_snippet(self, mocker):
        _, provider = _patch_common(mocker)
        result = CliRunner().invoke(main, ["review", "--file", "-", "--path", "a.py"], input="x = 1")
        assert result.exit_code != 0
        assert "--path cannot be combined with --file" in result.output
        provider.complete.assert_not_called()


class TestSnippetReview:
    def test_reviews_stdin_and_records_history(self, mocker):
        store, provider = _patch_common(mocker)

        result = CliRunner().invoke(main, ["review", "--file", "-", "--language", "python"], input="x = 1\n")

        assert result.exit_code == 0, result.output
        assert "Great code." in result.output
        [item] = _history(store)
        assert item["fileName"] == "snippet"
        assert item["language"] == "Python"
        assert item["code"] == "x = 1\n"
        assert item["kind"] == "file"
        assert "python" in provider.complete.call_args.args[1]

    def test_empty_snippet_rejected_without_request(self, mocker):
        store, provider = _patch_common(mocker)

        result = CliRunner().invoke(main, ["review", "--file", "-"], input="   \n")

        assert result.exit_code != 0
        assert "Cannot review empty code" in result.output
        provider.complete.assert_not_called()
        assert _history(store) == []

    def test_provider_failure_surfaces_one_error(self, mocker):
        from codelens_core.errors import RemoteFetchFailed

        store, provider = _patch_common(mocker)
        provider.complete.side_effect = RemoteFetchFailed("AnthropicProvider request failed: overloaded")

        result = CliRunner().invoke(main, ["review", "--file", "-"], input="x = 1")

        assert result.exit_code != 0
        assert result.output.count("Error:") == 1
        assert "overloaded" in result.output
        assert _history(store) == []

    def test_prompt_and_mode_forwarded(self, mocker):
        _, provider = _patch_common(mocker)

        CliRunner().invoke(
            main, ["review", "--file", "-", "--mode", "security", "--prompt", "Focus on SQL"], input="q = 1"
        )

        system, user = provider.complete.call_args.args
        assert "Security Audit" in system
        assert "Focus on SQL" in user

    def test_diff_requests_revision(self, mocker):
        _, provider = _patch_common(mocker, responses=["Use 2 instead.", "```python\nx = 2\n```"])

        result = CliRunner().invoke(main, ["review", "--file", "-", "--diff"], input="x = 1\n")

        assert result.exit_code == 0, result.output
        assert provider.complete.call_count == 2
        assert "Use 2 instead." in provider.complete.call_args.args[1]
        assert "+x = 2" in result.output
        assert "-x = 1" in result.output

    def test_save_writes_review_file(self, mocker):
        _patch_common(mocker)
        runner = CliRunner()
        with runner.isolated_filesystem() as fs:
            result = runner.invoke(main, ["review", "--file", "-", "--save"], input="x = 1")
            assert result.exit_code == 0, result.output
            with open(f"{fs}/snippet.review.md") as f:
                assert "Great code." in f.read()

    def test_non_utf8_snippet_is_one_error(self, mocker):
        store, provider = _patch_common(mocker)

        result = CliRunner().invoke(main, ["review", "--file", "-"], input=b"\xff\xfe bad")

        assert result.exit_code != 0
        assert isinstance(result.exception, SystemExit)
        assert result.output.count("Error:") == 1
        assert "UTF-8" in result.output
        provider.complete.assert_not_called()
        assert _history(store) == []

    def test_save_failure_is_one_error(self, mocker):
        store, _ = _patch_common(mocker)
        runner = CliRunner()
        with runner.isolated_filesystem() as fs:
            os.mkdir(f"{fs}/snippet.review.md")
            result = runner.invoke(main, ["review", "--file", "-", "--save"], input="x = 1")

        assert result.exit_code != 0
        assert isinstance(result.exception, SystemExit)
        assert result.output.count("Error:") == 1
        assert "Could not save the review" in result.output
        assert len(_history(store)) == 1


class TestLocalDirectoryReview:
    def _make_tree(self, tmp_path):
        (tmp_path / "pkg").mkdir()
        (tmp_path / "pkg" / "app.py").write_text("def run():\n    pass\n")
        (tmp_path / "pkg" / "util.ts").write_text("export const x = 1;\n")
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "dep.js").write_text("")
        return tmp_path

    def test_review_by_path(self, mocker, tmp_path):
        store, provider = _patch_common(mocker)
        root = self._make_tree(tmp_path)

        result = CliRunner().invoke(main, ["review", "--dir", str(root), "--path", "pkg/app.py"])

        assert result.exit_code == 0, result.output
        [item] = _history(store)
        assert item["fileName"] == "pkg/app.py"
        assert item["language"] == "Python"
        assert "def run():" in provider.complete.call_args.args[1]

    def test_interactive_selection_lists_files(self, mocker, tmp_path):
        store, _ = _patch_common(mocker)
        root = self._make_tree(tmp_path)

        result = CliRunner().invoke(main, ["review", "--dir", str(root)], input="2\n")

        assert result.exit_code == 0, result.output
        assert "pkg/app.py" in result.output
        assert "node_modules" not in result.output
        assert _history(store)[0]["fileName"] == "pkg/util.ts"

    def test_no_code_files(self, mocker, tmp_path):
        _, provider = _patch_common(mocker)
        (tmp_path / "notes.txt").write_text("hi")

        result = CliRunner().invoke(main, ["review", "--dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "No code files found" in result.output
        provider.complete.assert_not_called()

    def test_missing_directory_is_an_error(self, mocker, tmp_path):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["review", "--dir", str(tmp_path / "missing")])
        assert result.exit_code != 0
        assert "Failed to open directory" in result.output


class TestRepositoryReview:
    def test_invalid_url(self, mocker):
        _patch_common(mocker)
        get_repo = mocker.patch("codelens_cli.commands.review.get_repo")

        result = CliRunner().invoke(main, ["review", "--repo", "not a url"])

        assert result.exit_code != 0
        assert "Invalid GitHub repository URL" in result.output
        get_repo.assert_not_called()

    def test_single_file_review(self, mocker):
        store, provider = _patch_common(mocker)
        repo = _mock_repo({"src/main.go": _content("package main\n"), "README.md": _content("# hi")})
        mocker.patch("codelens_cli.commands.review.get_repo", return_value=repo)

        result = CliRunner().invoke(
            main, ["review", "--repo", "https://github.com/acme/widgets", "--path", "src/main.go"]
        )

        assert result.exit_code == 0, result.output
        repo.get_contents.assert_called_once_with("src/main.go")
        [item] = _history(store)
        assert item["fileName"] == "src/main.go"
        assert item["language"] == "Go"

    def test_whole_repo_review(self, mocker):
        store, provider = _patch_common(mocker)
        repo = _mock_repo({"a.py": _content("a = 1"), "b.py": _content("b = 2"), "c.py": _content("c = 3")})
        mocker.patch("codelens_cli.commands.review.get_repo", return_value=repo)

        result = CliRunner().invoke(main, ["review", "--repo", "https://github.com/acme/widgets", "--whole-repo"])

        assert result.exit_code == 0, result.output
        user = provider.complete.call_args.args[1]
        assert "a = 1" in user and "b = 2" in user and "c = 3" in user
        [item] = _history(store)
        assert item["kind"] == "repo"
        assert item["fileName"] == "acme/widgets"

    def test_whole_repo_one_fetch_failure_records_nothing(self, mocker):
        store, provider = _patch_common(mocker)
        repo = _mock_repo(
            {
                "a.py": _content("a = 1"),
                "b.py": GithubException(500, {"message": "Server Error"}, None),
                "c.py": _content("c = 3"),
            }
        )
        mocker.patch("codelens_cli.commands.review.get_repo", return_value=repo)

        result = CliRunner().invoke(main, ["review", "--repo", "https://github.com/acme/widgets", "--whole-repo"])

        assert result.exit_code != 0
        assert result.output.count("Error:") == 1
        assert "b.py" in result.output
        provider.complete.assert_not_called()
        assert _history(store) == []

    def test_whole_repo_refuses_test_generation(self, mocker):
        _, provider = _patch_common(mocker)
        get_repo = mocker.patch("codelens_cli.commands.review.get_repo")

        result = CliRunner().invoke(
            main,
            ["review", "--repo", "https://github.com/acme/widgets", "--whole-repo", "--mode", "test_generation"],
        )

        assert result.exit_code != 0
        assert "not available for repository-wide reviews" in result.output
        get_repo.assert_not_called()
        provider.complete.assert_not_called()


class TestHistoryCommands:
    def _seed(self, store, n=2):
        from codelens_store.history import HistoryCache

        cache = HistoryCache(store)
        items = [new_history_item(f"src/f{i}.py", "Python", f"Feedback {i}", f"x = {i}", "comprehensive") for i in range(n)]
        for item in items:
            cache.record(item)
        return items

    def test_list(self, mocker):
        store, _ = _patch_common(mocker)
        items = self._seed(store)

        result = CliRunner().invoke(main, ["history", "list"])

        assert result.exit_code == 0, result.output
        assert "src/f0.py" in result.output
        assert items[1].id[:8] in result.output

    def test_list_empty(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["history", "list"])
        assert "No review history yet" in result.output

    def test_show_by_prefix(self, mocker):
        store, _ = _patch_common(mocker)
        items = self._seed(store)

        result = CliRunner().invoke(main, ["history", "show", items[0].id[:12], "--code"])

        assert result.exit_code == 0, result.output
        assert "Feedback 0" in result.output
        assert "x = 0" in result.output

    def test_show_unknown(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["history", "show", "nope"])
        assert result.exit_code != 0
        assert "No history entry" in result.output

    def test_clear(self, mocker):
        store, _ = _patch_common(mocker)
        self._seed(store)

        result = CliRunner().invoke(main, ["history", "clear", "--yes"])

        assert result.exit_code == 0
        assert store.get(HISTORY_KEY) is None

    def test_clear_declined(self, mocker):
        store, _ = _patch_common(mocker)
        self._seed(store)
        CliRunner().invoke(main, ["history", "clear"], input="n\n")
        assert store.get(HISTORY_KEY) is not None

    def test_limit_shows_newest_only(self, mocker):
        store, _ = _patch_common(mocker)
        self._seed(store)

        result = CliRunner().invoke(main, ["history", "list", "--limit", "1"])

        assert result.exit_code == 0, result.output
        assert "src/f1.py" in result.output
        assert "src/f0.py" not in result.output

    def test_limit_must_be_positive(self, mocker):
        store, _ = _patch_common(mocker)
        self._seed(store)
        for limit in ("0", "-3"):
            result = CliRunner().invoke(main, ["history", "list", f"--limit={limit}"])
            assert result.exit_code == 2


class TestModesCommand:
    def test_lists_modes(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["modes"])
        assert result.exit_code == 0
        assert "test_generation" in result.output
        assert "comprehensive" in result.output


class TestBuildStore:
    def test_sqlite_store(self, tmp_path):
        store = _build_store({"store": "sqlite", "store_path": str(tmp_path / "h.db")})
        assert isinstance(store, SQLiteStore)
        store.close()

    def test_memory_store(self):
        assert isinstance(_build_store({"store": "memory"}), MemoryStore)

    def test_unknown_store_falls_back_to_memory(self):
        assert isinstance(_build_store({"store": "redis"}), MemoryStore)

    def test_unopenable_sqlite_falls_back_to_memory(self, mocker):
        mocker.patch("codelens_store.sqlite.SQLiteStore.__init__", side_effect=OSError("read-only"))
        assert isinstance(_build_store({"store": "sqlite", "store_path": "/x/h.db"}), MemoryStore)
