from __future__ import annotations

import pytest

from undercroft.__main__ import main


def test_prints_a_map(capsys: pytest.CaptureFixture[str]) -> None:
    main(["--pipeline", "caves", "--seed", "5", "--width", "40", "--height", "25"])

    out = capsys.readouterr().out
    lines = out.splitlines()
    assert lines[0] == "Depth 1, pipeline caves"
    map_lines = lines[1:26]
    assert all(len(line) == 40 for line in map_lines)
    assert sum(line.count("@") for line in map_lines) == 1
    assert sum(line.count(">") for line in map_lines) == 1
    assert lines[-1].endswith("spawns")


def test_history_flag_prints_steps(capsys: pytest.CaptureFixture[str]) -> None:
    main(["--pipeline", "prefab", "--history"])

    out = capsys.readouterr().out
    assert "--- step 0 ---" in out
    assert "pipeline prefab" in out


def test_rejects_unknown_pipeline() -> None:
    with pytest.raises(SystemExit):
        main(["--pipeline", "maze"])
