"""Tests for the graphtrace command line."""

import json

import pytest

from graphtrace.cli import main

from conftest import D, build_graph


@pytest.fixture()
def graph_file(tmp_path):
    """1-2, 1-3, 2-4 undirected plus a directed 4->3 of weight 5."""
    graph = build_graph(4, [(1, 2, 1), (1, 3, 1), (2, 4, 1), (4, 3, 5, D)])
    path = tmp_path / "graph.json"
    path.write_text(graph.snapshot().to_json())
    return str(path)


class TestRun:
    def test_prints_trace_and_summary(self, graph_file, capsys):
        assert main(["run", graph_file, "-a", "dfs", "-s", "1"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0].split() == ["visit", "1"]
        assert out[1].split() == ["visit", "1", "->", "3"]
        assert out[-1] == "DFS: visited [1, 3, 2, 4]"

    def test_dijkstra_path_weight(self, graph_file, capsys):
        assert main(["run", graph_file, "-a", "dijkstra", "-s", "3", "-e", "2"]) == 0
        out = capsys.readouterr().out
        assert "path [3, 1, 2] (weight 2)" in out

    def test_json_output(self, graph_file, capsys):
        assert main(["run", graph_file, "-a", "bfs", "-s", "2", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["algorithm"] == "bfs"
        assert [e["to"] for e in data["visited_edges"]] == [2, 1, 4, 3]
        assert data["visited_edges"][0]["from"] == -1

    def test_infeasible_run_exits_nonzero(self, graph_file, capsys):
        assert main(["run", graph_file, "-a", "prim", "-s", "1"]) == 1
        assert "undirected" in capsys.readouterr().err

    def test_missing_end_node(self, graph_file, capsys):
        assert main(["run", graph_file, "-a", "dijkstra", "-s", "1"]) == 1
        assert "requires an end node" in capsys.readouterr().err

    def test_missing_graph_file(self, tmp_path, capsys):
        assert main(["run", str(tmp_path / "missing.json"), "-a", "bfs", "-s", "1"]) == 1
        assert "Could not load graph" in capsys.readouterr().err


class TestPlay:
    def test_auto_playback_timeline(self, graph_file, capsys):
        assert main(["play", graph_file, "-a", "bfs", "-s", "1", "--speed", "100"]) == 0
        out = capsys.readouterr().out.splitlines()
        steps = [line for line in out if line.startswith("[")]
        assert len(steps) == 4
        assert steps[0].startswith("[    100 ms] #0")
        assert "Playback done at 500 ms" in out

    def test_manual_playback_runs_to_completion(self, graph_file, capsys):
        assert main(["play", graph_file, "-a", "dfs", "-s", "1", "--mode", "manual"]) == 0
        out = capsys.readouterr().out
        assert "Playback complete at 1600 ms" in out

    def test_speed_level(self, graph_file, capsys):
        assert main(["play", graph_file, "-a", "bfs", "-s", "1", "--speed", "2x"]) == 0
        out = capsys.readouterr().out.splitlines()
        steps = [line for line in out if line.startswith("[")]
        assert steps[0].startswith("[    200 ms] #0")
        assert "Playback done at 1000 ms" in out

    def test_unknown_speed_level(self, graph_file, capsys):
        assert main(["play", graph_file, "-a", "bfs", "-s", "1", "--speed", "8x"]) == 1
        assert "Unknown speed level: 8x" in capsys.readouterr().err

    def test_steps_are_narrated(self, graph_file, capsys):
        assert main(["play", graph_file, "-a", "bfs", "-s", "1", "--speed", "100"]) == 0
        steps = [line for line in capsys.readouterr().out.splitlines() if line.startswith("[")]
        assert steps[0].endswith("| Visiting node 1, added 2, 3 to queue")
        assert steps[-1].endswith("| Visiting node 4")


class TestInfo:
    def test_summary(self, graph_file, capsys):
        assert main(["info", graph_file]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "4 nodes, 7 edges (next id 4)"
        assert out[4].strip() == "4: 2[1], 3[5>]"

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out
