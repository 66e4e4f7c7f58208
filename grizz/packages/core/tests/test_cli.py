"""CLI 测试 -- python -m grizz.core"""

import json
import sys

import pytest
from grizz.core.__main__ import load_events, main
from grizz.core.models import WireFormatError

WIRE_EVENTS = [
    {"op": "added", "id": "1", "text": "Check emails", "time": "15m", "enjoyment": "0",
     "timeStamp": "2026-10-17T08:00:00.000Z"},
    {"op": "completed", "id": "1", "timeStamp": "2026-10-17T08:05:00.000Z"},
    {"op": "list_init", "name": "Monday", "timeStamp": "2026-10-17T07:00:00.000Z"},
]


@pytest.fixture
def events_file(tmp_path):
    path = tmp_path / "events.json"
    path.write_text(json.dumps(WIRE_EVENTS), encoding="utf-8")
    return path


class TestCli:
    def test_load_events(self, events_file):
        events = load_events(str(events_file))
        assert [e.op for e in events] == ["added", "completed", "list_init"]
        assert events[0].id == 1

    def test_load_events_rejects_non_array(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"op": "added"}', encoding="utf-8")
        with pytest.raises(WireFormatError):
            load_events(str(path))

    def test_replay_command(self, events_file, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["grizz.core", "replay", "planner", str(events_file)])
        main()
        out = capsys.readouterr().out
        assert "清单: Monday" in out
        assert "[x] 1  Check emails" in out
        # 15m 基础分 100 × 喜好度 0 倍率 6
        assert "得分: 600" in out
        assert "Tasks completed: 1/1" in out
        assert "Completion rate: 100% (Excellent progress)" in out
        assert "Time remaining: All tasks complete" in out

    def test_log_command(self, events_file, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["grizz.core", "log", str(events_file)])
        main()
        out = capsys.readouterr().out
        assert out.startswith("3 events total")

    def test_unknown_command_exits(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["grizz.core", "frobnicate"])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1

    def test_missing_file_exits(self, monkeypatch, tmp_path):
        monkeypatch.setattr(sys, "argv", ["grizz.core", "log", str(tmp_path / "none.json")])
        with pytest.raises(SystemExit):
            main()

    def test_show_command(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("GRIZZ_DB_PATH", str(tmp_path / "sqlite" / "grizz.db"))
        monkeypatch.setattr(sys, "argv", ["grizz.core", "show", "shopping", "2026-10-17"])
        main()
        out = capsys.readouterr().out
        assert "0 条事件 -> 0 个条目" in out

    def test_sync_command_with_memory_store(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("GRIZZ_STORE_MODE", "memory")
        monkeypatch.setenv("GRIZZ_SNAPSHOT_DB_PATH", str(tmp_path / "snapshots.db"))
        monkeypatch.setattr(sys, "argv", ["grizz.core", "sync", "shopping", "2026-10-17"])
        main()
        out = capsys.readouterr().out
        assert "同步状态: synced" in out
        assert "待确认: 0" in out
        assert "0 条事件 -> 0 个条目" in out
        assert (tmp_path / "snapshots.db").exists()

    def test_replay_shopping_prints_suggestions(self, tmp_path, monkeypatch, capsys):
        """已勾选并移除的条目作为补全建议出现，仍在清单上的条目不出现"""
        records = [
            {"op": "added", "id": "1", "text": "Milk", "timeStamp": "2026-10-17T08:00:00.000Z"},
            {"op": "checked", "id": "1", "timeStamp": "2026-10-17T08:01:00.000Z"},
            {"op": "removed", "id": "1", "timeStamp": "2026-10-17T08:02:00.000Z"},
            {"op": "added", "id": "2", "text": "Eggs", "timeStamp": "2026-10-17T08:03:00.000Z"},
            {"op": "checked", "id": "2", "timeStamp": "2026-10-17T08:04:00.000Z"},
        ]
        path = tmp_path / "shopping.json"
        path.write_text(json.dumps(records), encoding="utf-8")
        monkeypatch.setattr(sys, "argv", ["grizz.core", "replay", "shopping", str(path)])
        main()
        out = capsys.readouterr().out
        assert "建议: Milk (1)" in out
        assert "Eggs (1)" not in out

    def test_replay_empty_planner_report(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "empty.json"
        path.write_text("[]", encoding="utf-8")
        monkeypatch.setattr(sys, "argv", ["grizz.core", "replay", "planner", str(path)])
        main()
        out = capsys.readouterr().out
        assert "No tasks scheduled for today" in out
