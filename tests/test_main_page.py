"""Smoke tests for the Streamlit form page."""
from unittest.mock import patch

from streamlit.testing.v1 import AppTest

SCRIPT = "../main.py"


def test_page_renders():
    at = AppTest.from_file(SCRIPT, default_timeout=30).run()
    assert not at.exception
    assert at.title[0].value == "📋 Site Visit"
    assert at.text_input(key="f_project_code").value == ""


def test_empty_form_blocks_generation():
    at = AppTest.from_file(SCRIPT, default_timeout=30).run()
    with patch("report_client.requests.post") as post:
        at.button(key="generate_btn").click().run()
    post.assert_not_called()
    assert not at.exception
    assert any("Required fields" in e.value for e in at.error)


def test_permit_types_follow_radio():
    at = AppTest.from_file(SCRIPT, default_timeout=30).run()
    assert len(at.checkbox) == 0
    at.radio(key="f_permits").set_value("Yes").run()
    assert [c.label for c in at.checkbox] == ["Municipal", "Serviu", "Mop", "Building"]


def test_map_link_shown_for_coordinates():
    at = AppTest.from_file(SCRIPT, default_timeout=30).run()
    at.text_input(key="f_latitude").input("-33.437916")
    at.text_input(key="f_longitude").input("-70.650641").run()
    assert any(
        "https://maps.google.com/?q=-33.437916,-70.650641" in m.value for m in at.markdown
    )


def test_gps_button_fills_coordinates():
    answer = {"coords": {"latitude": -33.4379161, "longitude": -70.6506409}}
    at = AppTest.from_file(SCRIPT, default_timeout=30).run()
    with patch("streamlit_js_eval.streamlit_js_eval", return_value=answer) as js:
        at.button(key="geo_btn").click().run()
        # the answer is consumed once; later reruns don't ask the browser again
        at.run()

    assert not at.exception
    assert js.call_count == 1
    assert js.call_args.kwargs["key"] == "geo_1"
    assert at.text_input(key="f_latitude").value == "-33.437916"
    assert at.text_input(key="f_longitude").value == "-70.650641"
    assert any("Location acquired" in s.value for s in at.success)
    assert any(
        "https://maps.google.com/?q=-33.437916,-70.650641" in m.value for m in at.markdown
    )


def test_gps_permission_denied_shows_error():
    at = AppTest.from_file(SCRIPT, default_timeout=30).run()
    with patch("streamlit_js_eval.streamlit_js_eval", return_value={"error": {"code": 1}}):
        at.button(key="geo_btn").click().run()

    assert not at.exception
    assert any("Location permission denied" in e.value for e in at.error)
    assert at.text_input(key="f_latitude").value == ""
    assert at.text_input(key="f_longitude").value == ""


def test_gps_waiting_for_browser():
    at = AppTest.from_file(SCRIPT, default_timeout=30).run()
    with patch("streamlit_js_eval.streamlit_js_eval", return_value=None):
        at.button(key="geo_btn").click().run()

    assert not at.exception
    assert any(c.value == "Getting location..." for c in at.caption)
    assert at.text_input(key="f_latitude").value == ""
