import json

import pytest

from lexcluster.cli import main


@pytest.fixture
def embeddings(tmp_path):
    path = tmp_path / "emb.csv"
    path.write_text("cat,0,0\ndog,1,0\nfish,5,5\nbroken\n")
    return path


def test_cli_prints_and_writes(embeddings, tmp_path, capsys):
    out = tmp_path / "out.txt"
    code = main([str(embeddings), "cat", "--output", str(out), "--workers", "2"])
    assert code == 0
    printed = capsys.readouterr().out.splitlines()
    assert printed == [
        "dog (distance: 1.0000) [Nearest Neighbor]",
        "fish (distance: 7.0711) [Nearest Neighbor]",
    ]
    assert out.read_text().splitlines()[0] == "Search Results for: cat"


def test_cli_json_without_writing(embeddings, tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    code = main([str(embeddings), "dog", "-a", "hierarchical", "--format", "json", "--no-write"])
    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["algorithm"] == "Hierarchical"
    # three candidates never reach the five-cluster target, so dog stays alone
    assert payload["matches"] == []
    assert not (tmp_path / "out.txt").exists()


def test_cli_unknown_word_exits_with_error(embeddings, tmp_path):
    assert main([str(embeddings), "unicorn", "--no-write"]) == 1


def test_cli_missing_file(tmp_path):
    assert main([str(tmp_path / "missing.csv"), "cat", "--no-write"]) == 1


def test_cli_rejects_bad_arguments(embeddings):
    with pytest.raises(SystemExit) as exc:
        main([str(embeddings), "cat", "--top-n", "0"])
    assert exc.value.code == 2
