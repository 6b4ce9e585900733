import json
import threading
from pathlib import Path

from metalctl.observers.dispatcher import EventBus
from metalctl.observers.events import HostOperationFailed, HostOperationSucceeded, ManagerReady, new_ctx
from metalctl.observers.jsonfile import JsonFileObserver
from metalctl.observers.logger import LoggerObserver


class FakeLogger:
    def __init__(self): self.lines = []
    def debug(self, msg, *args): self.lines.append(msg % args)


def test_event_file_sits_beside_run_log(tmp_path: Path):
    ob = JsonFileObserver.beside(tmp_path / "logs" / "metalctl-20260101-000000-run1.log")
    assert ob.path == tmp_path / "logs" / "metalctl-20260101-000000-run1.jsonl"
    assert ob.path.parent.is_dir()


def test_json_lines_omit_unset_fields(tmp_path: Path):
    ob = JsonFileObserver(tmp_path / "events.jsonl")
    ob.notify(HostOperationSucceeded(host="A", action="poweron", duration_ms=5, **new_ctx("ctx", run_id="r1")))
    ob.notify(ManagerReady(management_type="redfish", hosts=["A"], **new_ctx(None, "phaseX", "r1")))

    first, second = [json.loads(line) for line in (tmp_path / "events.jsonl").read_text().splitlines()]
    assert first["type"] == "HostOperationSucceeded"
    assert "result" not in first
    assert "phase" not in first
    assert second["hosts"] == ["A"]
    assert "context" not in second


def test_parallel_emitters_write_whole_lines(tmp_path: Path):
    ob = JsonFileObserver(tmp_path / "events.jsonl")
    bus = EventBus([ob])

    def emit(i):
        for _ in range(20):
            bus.emit(HostOperationFailed(host=f"h{i}", action="reboot", error="x" * 500, **new_ctx("c", run_id="r")))

    threads = [threading.Thread(target=emit, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = (tmp_path / "events.jsonl").read_text().splitlines()
    assert len(lines) == 160
    assert all(json.loads(line)["action"] == "reboot" for line in lines)


def test_logger_observer_skips_timestamps_and_run_id():
    logger = FakeLogger()
    LoggerObserver(logger).notify(
        HostOperationFailed(host="B", action="poweroff", error="down", **new_ctx("site-a", "phaseX", "r9"))
    )
    [line] = logger.lines
    assert line.startswith("[EVENT] HostOperationFailed ")
    assert "host=B" in line
    assert "error=down" in line
    assert "run_id" not in line
    assert "ts=" not in line
