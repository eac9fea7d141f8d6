from status_bar import render_status


def test_status_shows_range_and_estimate():
    text = render_status(
        {"file_path": "/data/x.csv", "state": "ready", "top_row": 0, "bottom_row": 20, "total_rows": 84},
        60,
    )
    assert len(text) == 60
    assert "x.csv" in text
    assert "rows 1-20 of 84+" in text
    assert "READY" in text


def test_status_exact_total_when_exhausted():
    text = render_status(
        {"state": "exhausted", "top_row": 80, "bottom_row": 100, "total_rows": 100, "exact": True},
        80,
    )
    assert "rows 81-100 of 100 " in text
    assert "END" in text


def test_status_message_wins():
    text = render_status({"status_msg": "read failed", "top_row": 0, "total_rows": 3}, 30)
    assert text.startswith(" read failed")


def test_status_empty_source():
    text = render_status({"state": "exhausted", "total_rows": 0, "exact": True}, 40)
    assert "rows 0 of 0" in text


def test_status_truncated_to_width():
    assert len(render_status({"file_path": "a" * 200}, 10)) == 10
