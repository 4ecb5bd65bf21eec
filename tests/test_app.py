"""
Tests for the command-line interface.
"""

from pathlib import Path

import pytest

from jobmatch import __version__
from jobmatch.app import main
from jobmatch.database import get_session
from jobmatch.explain import NO_ANALYSIS
from jobmatch.repository import MatchRecordStore


SAMPLE_SEED = Path(__file__).resolve().parent.parent / "data" / "sample_seed.json"


@pytest.fixture
def cli_env(tmp_path, clean_env):
    """No API key, no .env file, and a database path inside tmp_path."""
    clean_env.chdir(tmp_path)
    return tmp_path / "cli.db"


@pytest.fixture
def seeded_db(cli_env, capsys):
    main(["--db", str(cli_env), "init-db"])
    main(["--db", str(cli_env), "seed", "--input", str(SAMPLE_SEED)])
    capsys.readouterr()
    return cli_env


def stored_matches(db_path, candidate_id):
    session = get_session(db_path)
    try:
        return MatchRecordStore(session).find_by_candidate_order_by_score_desc(candidate_id)
    finally:
        session.close()


class TestCli:
    def test_version(self, capsys):
        main(["--version"])
        assert capsys.readouterr().out.strip() == __version__

    def test_no_command_prints_help(self, cli_env, capsys):
        main([])
        assert "usage" in capsys.readouterr().out.lower()

    def test_init_db(self, cli_env, capsys):
        main(["--db", str(cli_env), "init-db"])
        assert cli_env.exists()
        assert "Database ready" in capsys.readouterr().out

    def test_seed(self, cli_env, capsys):
        main(["--db", str(cli_env), "seed", "--input", str(SAMPLE_SEED)])
        assert "Inserted: candidates=2 resumes=1 jobs=3 skipped=0" in capsys.readouterr().out

    def test_seed_dry_run(self, cli_env, capsys):
        main(["--db", str(cli_env), "seed", "--input", str(SAMPLE_SEED), "--dry-run"])
        assert "Would insert" in capsys.readouterr().out
        assert not cli_env.exists()

    def test_seed_missing_input(self, cli_env):
        with pytest.raises(SystemExit, match="Input file not found"):
            main(["--db", str(cli_env), "seed", "--input", "nope.json"])

    def test_missing_database(self, cli_env):
        with pytest.raises(SystemExit, match="Database not found"):
            main(["--db", str(cli_env), "list", "--candidate", "cand-data"])


class TestMatchCommands:
    """End-to-end runs against the sample seed without an API key."""

    def test_match_ranks_and_stores(self, seeded_db, capsys):
        main(["--db", str(seeded_db), "match", "--candidate", "cand-fullstack", "--details"])

        out = capsys.readouterr().out
        assert "Found 2 matches" in out
        assert "1. 100.0%  job=job-backend (Junior Backend Developer)" in out
        assert "2. 1.0%  job=job-analyst (Data Analyst Intern)" in out
        assert "No match details available." in out
        assert [m.job_id for m in stored_matches(seeded_db, "cand-fullstack")] == ["job-backend", "job-analyst"]

    def test_match_min_score(self, seeded_db, capsys):
        main(["--db", str(seeded_db), "match", "--candidate", "cand-fullstack", "--min-score", "50"])

        out = capsys.readouterr().out
        assert "Found 1 matches" in out
        assert len(stored_matches(seeded_db, "cand-fullstack")) == 2

    def test_match_unknown_candidate(self, seeded_db):
        with pytest.raises(SystemExit, match="Candidate not found"):
            main(["--db", str(seeded_db), "match", "--candidate", "ghost"])

    def test_list(self, seeded_db, capsys):
        main(["--db", str(seeded_db), "list", "--candidate", "cand-fullstack"])
        assert "No stored matches." in capsys.readouterr().out

        main(["--db", str(seeded_db), "match", "--candidate", "cand-fullstack"])
        capsys.readouterr()
        main(["--db", str(seeded_db), "list", "--candidate", "cand-fullstack", "--min-score", "50"])

        out = capsys.readouterr().out
        assert "job=job-backend" in out
        assert "job=job-analyst" not in out

    def test_view(self, seeded_db, capsys):
        main(["--db", str(seeded_db), "match", "--candidate", "cand-fullstack"])
        match_id = stored_matches(seeded_db, "cand-fullstack")[0].id
        capsys.readouterr()

        main(["--db", str(seeded_db), "view", "--match", match_id, "--candidate", "cand-fullstack"])

        assert "[viewed]" in capsys.readouterr().out
        assert stored_matches(seeded_db, "cand-fullstack")[0].viewed is True

    def test_view_by_other_candidate(self, seeded_db):
        main(["--db", str(seeded_db), "match", "--candidate", "cand-fullstack"])
        match_id = stored_matches(seeded_db, "cand-fullstack")[0].id

        with pytest.raises(SystemExit, match="permission"):
            main(["--db", str(seeded_db), "view", "--match", match_id, "--candidate", "cand-data"])


class TestAnalyzeCommand:
    def test_overlap_summary(self, cli_env, capsys):
        main(["analyze", "--candidate-skills", "Java, SQL", "--job-skills", "Java,Docker"])

        out = capsys.readouterr().out
        assert "Direct skill match: 1/2 (50%)" in out
        assert "Matched: Java" in out
        assert "Missing: Docker" in out

    def test_ai_analysis_without_key(self, cli_env, capsys):
        main(["analyze", "--candidate-skills", "Java", "--job-skills", "Go", "--ai"])
        assert NO_ANALYSIS in capsys.readouterr().out
