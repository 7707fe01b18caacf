import json

import pytest

from lexcluster.builder import ClusterResult
from lexcluster.report import ReportFormatter, write_results
from lexcluster.strategies import ClusteringAlgorithm, WordDistance


def make_result():
    return ClusterResult(
        query="cat",
        algorithm=ClusteringAlgorithm.HIERARCHICAL,
        matches=[WordDistance("dog", 1.0), WordDistance("fish", 7.0710678)],
    )


def test_text_report():
    assert ReportFormatter(make_result()).render("text").splitlines() == [
        "dog (distance: 1.0000) [Hierarchical Group]",
        "fish (distance: 7.0711) [Hierarchical Group]",
    ]


def test_json_report():
    payload = json.loads(ReportFormatter(make_result()).to_json())
    assert payload["query"] == "cat"
    assert payload["algorithm"] == "Hierarchical"
    assert payload["matches"][1] == {"word": "fish", "distance": 7.0711}


def test_markdown_report():
    table = ReportFormatter(make_result()).to_markdown_table()
    assert "| 2 | fish | 7.0711 |" in table
    with pytest.raises(ValueError):
        ReportFormatter(make_result()).render("html")


def test_write_results(tmp_path):
    path = write_results(make_result().to_lines(), tmp_path / "out.txt", "cat")
    lines = path.read_text().splitlines()
    assert lines[0] == "Search Results for: cat"
    assert lines[1] == "-" * 40
    assert lines[2] == "dog (distance: 1.0000) [Hierarchical Group]"
    assert len(lines) == 4
