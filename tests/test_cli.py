"""Tests for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from vibeinsights.cli import _read_corpus, _setup_logging, app
from vibeinsights.errors import CompletionError
from vibeinsights.ingestion.segmenter import format_file_marker


runner = CliRunner()


def _write_corpus(path: Path, files: int = 3, body: int = 100) -> Path:
    path.write_text(
        "".join(format_file_marker(f"src/f{i}.py") + "x" * body + "\n\n" for i in range(files)),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)


@pytest.fixture
def fake_client() -> MagicMock:
    client = MagicMock()
    client.complete = AsyncMock(return_value="generated docs")
    client.close = AsyncMock()
    return client


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("vibeinsights.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("vibeinsights.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestReadCorpus:
    """Tests for _read_corpus helper."""

    def test_reads_text(self, tmp_path: Path) -> None:
        """Returns file contents."""
        corpus = tmp_path / "corpus.txt"
        corpus.write_text("code", encoding="utf-8")

        assert _read_corpus(corpus) == "code"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Raises a usage error for a missing corpus."""
        import typer

        with pytest.raises(typer.BadParameter):
            _read_corpus(tmp_path / "missing.txt")


class TestChunksCommand:
    """Tests for the chunks command."""

    def test_chunks_table(self, tmp_path: Path) -> None:
        """Lists one row per chunk with file names."""
        corpus = _write_corpus(tmp_path / "corpus.txt")

        result = runner.invoke(app, ["chunks", str(corpus), "--max-chunk-size", "200"])

        assert result.exit_code == 0
        assert "3 chunk(s)" in result.stdout
        assert "src/f0.py" in result.stdout
        assert "src/f2.py" in result.stdout

    def test_chunks_invalid_size(self, tmp_path: Path) -> None:
        """Rejects a non-positive chunk size."""
        corpus = _write_corpus(tmp_path / "corpus.txt")

        result = runner.invoke(app, ["chunks", str(corpus), "--max-chunk-size", "0"])

        assert result.exit_code != 0

    def test_chunks_missing_corpus(self, tmp_path: Path) -> None:
        """Fails for a corpus that does not exist."""
        result = runner.invoke(app, ["chunks", str(tmp_path / "nope.txt")])

        assert result.exit_code != 0


class TestGenerateCommand:
    """Tests for the generate command."""

    @patch("vibeinsights.cli.OpenAICompletionClient")
    def test_generate_prints_document(
        self, mock_client_class: MagicMock, fake_client: MagicMock, api_key: None, tmp_path: Path
    ) -> None:
        """Prints the combined result and metrics."""
        mock_client_class.return_value = fake_client
        corpus = _write_corpus(tmp_path / "corpus.txt", files=1)

        result = runner.invoke(app, ["generate", str(corpus)])

        assert result.exit_code == 0
        assert "generated docs" in result.stdout
        mock_client_class.assert_called_once_with("sk-test", base_url=None)
        fake_client.complete.assert_awaited_once()

    @patch("vibeinsights.cli.OpenAICompletionClient")
    def test_generate_writes_output(
        self, mock_client_class: MagicMock, fake_client: MagicMock, api_key: None, tmp_path: Path
    ) -> None:
        """Writes the combined document to the output path."""
        mock_client_class.return_value = fake_client
        corpus = _write_corpus(tmp_path / "corpus.txt")
        output = tmp_path / "docs" / "architecture.md"

        result = runner.invoke(
            app,
            [
                "generate",
                str(corpus),
                "--output",
                str(output),
                "--max-chunk-size",
                "200",
                "--concurrency",
                "2",
            ],
        )

        assert result.exit_code == 0
        text = output.read_text(encoding="utf-8")
        assert "---- PART 1 OF 3 ----" in text
        assert "---- PART 3 OF 3 ----" in text
        assert fake_client.complete.await_count == 3

    @patch("vibeinsights.cli.OpenAICompletionClient")
    def test_generate_reports_failed_chunks(
        self, mock_client_class: MagicMock, fake_client: MagicMock, api_key: None, tmp_path: Path
    ) -> None:
        """Warns about chunks that need re-processing."""
        fake_client.complete.side_effect = ["part one", CompletionError("rate limited")]
        mock_client_class.return_value = fake_client
        corpus = _write_corpus(tmp_path / "corpus.txt", files=2)

        result = runner.invoke(
            app, ["generate", str(corpus), "--max-chunk-size", "200", "--concurrency", "1"]
        )

        assert result.exit_code == 0
        assert "1 chunk(s) failed" in result.stdout
        assert "rate limited" in result.stdout

    @patch("vibeinsights.cli.OpenAICompletionClient")
    def test_generate_custom_type_uses_prompt(
        self, mock_client_class: MagicMock, fake_client: MagicMock, api_key: None, tmp_path: Path
    ) -> None:
        """Sends the custom request inside the prompt."""
        mock_client_class.return_value = fake_client
        corpus = _write_corpus(tmp_path / "corpus.txt", files=1)

        result = runner.invoke(
            app, ["generate", str(corpus), "--type", "custom", "--prompt", "Summarise the tests"]
        )

        assert result.exit_code == 0
        user_prompt = fake_client.complete.call_args.args[1]
        assert "Summarise the tests" in user_prompt

    @patch("vibeinsights.cli.OpenAICompletionClient")
    def test_generate_closes_client(
        self, mock_client_class: MagicMock, fake_client: MagicMock, api_key: None, tmp_path: Path
    ) -> None:
        """Releases the completion client once the run finishes."""
        fake_client.complete.side_effect = CompletionError("rate limited")
        mock_client_class.return_value = fake_client
        corpus = _write_corpus(tmp_path / "corpus.txt", files=1)

        result = runner.invoke(app, ["generate", str(corpus)])

        assert result.exit_code == 0
        fake_client.close.assert_awaited_once()

    @patch("vibeinsights.cli.OpenAICompletionClient")
    def test_generate_without_api_key(
        self,
        mock_client_class: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
    ) -> None:
        """Fails before creating a client when no key is set."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        corpus = _write_corpus(tmp_path / "corpus.txt", files=1)

        result = runner.invoke(app, ["generate", str(corpus)])

        assert result.exit_code != 0
        mock_client_class.assert_not_called()

    @patch("vibeinsights.cli.OpenAICompletionClient")
    def test_generate_unknown_type(
        self, mock_client_class: MagicMock, fake_client: MagicMock, api_key: None, tmp_path: Path
    ) -> None:
        """Rejects unknown documentation types."""
        mock_client_class.return_value = fake_client
        corpus = _write_corpus(tmp_path / "corpus.txt", files=1)

        result = runner.invoke(app, ["generate", str(corpus), "--type", "poetry"])

        assert result.exit_code != 0
        fake_client.complete.assert_not_called()


class TestServeCommand:
    """Tests for the serve command."""

    def test_serve_runs_uvicorn(self) -> None:
        """Starts uvicorn with the web app."""
        uvicorn = pytest.importorskip("uvicorn")
        with patch.object(uvicorn, "run") as mock_run:
            result = runner.invoke(app, ["serve", "--port", "9000"])

        assert result.exit_code == 0
        assert mock_run.call_args.kwargs["port"] == 9000
