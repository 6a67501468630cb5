from anesrec.timer.case_timer import CaseTimer, format_hms, load_timer, save_timer


def test_format_hms():
    assert format_hms(0) == "00:00:00"
    assert format_hms(3725.9) == "01:02:05"
    assert format_hms(-4) == "00:00:00"


def test_start_stop_accumulates():
    t = CaseTimer()
    assert t.start(now=100.0)
    assert t.start(now=110.0) is False
    assert t.elapsed_seconds(now=160.0) == 60.0

    assert t.stop(now=160.0)
    assert t.stop(now=500.0) is False
    assert t.display(now=900.0) == "00:01:00"

    t.start(now=1000.0)
    assert t.elapsed_seconds(now=1030.0) == 90.0


def test_save_and_load_running_timer(tmp_path):
    path = tmp_path / "timer.json"
    t = CaseTimer()
    t.start(now=100.0)
    save_timer(path, t)

    restored = load_timer(path)
    assert restored.running
    assert restored.elapsed_seconds(now=400.0) == 300.0


def test_load_missing_or_corrupt(tmp_path):
    assert load_timer(tmp_path / "none.json") == CaseTimer()

    path = tmp_path / "timer.json"
    path.write_text('{"start_time": "soon"}')
    assert load_timer(path) == CaseTimer()
