from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from timesheet_models import current_iso_week

APP = str(Path(__file__).resolve().parent.parent / "timesheet_app.py")


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("TS_DATABASE_URL", "")
    monkeypatch.setenv("TS_LOG_PATH", str(tmp_path / "app.log"))
    at = AppTest.from_file(APP, default_timeout=30)
    at.run()
    assert not at.exception
    return at


def test_year_options_stay_put_when_a_year_is_picked(app):
    this_year = current_iso_week()[0]
    year = app.selectbox(key="year")
    before = list(year.options)

    year.select(this_year + 3).run()

    assert app.session_state["year"] == this_year + 3
    assert list(app.selectbox(key="year").options) == before
    assert str(this_year - 2) in before
