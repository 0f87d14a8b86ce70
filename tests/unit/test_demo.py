"""
Tests for the command line demo.
"""

import asyncio

from zkpcolor.demo import main, run_demo


class TestDemo:
    """Test the scripted demo."""

    def test_manual_rounds(self, capsys):
        assert main(["--vertices", "6", "--rounds", "4", "--seed", "1"]) == 0

        out = capsys.readouterr().out
        assert "CHALLENGER: Graph has 6 vertices" in out
        assert "SOLVER: Found a valid 3-coloring" in out
        assert out.count("=> PASS") == 4
        assert "All 4 checks passed" in out

    def test_auto_rounds(self, capsys):
        assert main(["--vertices", "10", "--rounds", "3", "--seed", "2", "--auto"]) == 0
        assert capsys.readouterr().out.count("[Round") == 3

    def test_edgeless_graph(self, capsys):
        stats = asyncio.run(run_demo(vertex_count=1, rounds=3, seed=0))

        assert stats.rounds == 0
        assert "Nothing to check" in capsys.readouterr().out
