"""
Tests for the command-line entry point in mock mode
"""
import re

import pytest

from appsynth.main import build_parser, main


class TestMain:
    """Test suite for the CLI"""

    @pytest.fixture
    def db_args(self, tmp_path):
        return ["--database", f"sqlite:///{tmp_path / 'appsynth.db'}"]

    def _project_id(self, output):
        match = re.search(r"Project created: (\S+)", output)
        assert match, output
        return match.group(1)

    def test_synth_iterate_show(self, db_args, tmp_path, capsys):
        main(db_args + ["synth", "--prompt", "Build a todo app", "--name", "Todo"])
        output = capsys.readouterr().out
        project_id = self._project_id(output)
        assert "Synthesis completed: 2 entities, 2 components, 1 pages" in output

        active = tmp_path / "Header.tsx"
        active.write_text("export const Header = () => null", encoding="utf-8")
        main(db_args + ["iterate", "--project", project_id, "--message", "Add a header",
                        "--active-file", str(active)])
        assert "Added a header (1 action(s) applied)" in capsys.readouterr().out

        summary = tmp_path / "summary.md"
        main(db_args + ["show", "--project", project_id, "--out", str(summary)])
        text = summary.read_text(encoding="utf-8")
        assert text.startswith("# Todo")
        assert "| Task | completed | Boolean |" in text
        assert "- Header" in text
        assert "- Dashboard (`/dashboard`)" in text
        assert "- **assistant**: Added a header" in text

    def test_raw_dir_collects_responses(self, db_args, tmp_path, capsys):
        raw_dir = tmp_path / "raw"
        main(db_args + ["--raw-dir", str(raw_dir), "synth", "--prompt", "Build a todo app"])
        labels = sorted(path.name.split("_", 1)[1] for path in raw_dir.iterdir())
        assert labels == ["components.txt", "pages.txt", "schema.txt"]

    def test_live_mode_requires_key(self, db_args, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setattr("appsynth.main.load_dotenv", lambda: None)
        with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
            main(db_args + ["--mode", "live", "--provider", "gemini", "synth", "--prompt", "x"])

    def test_subcommand_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--mode", "mock"])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
