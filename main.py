from typing import List, Tuple

import streamlit as st
from streamlit_js_eval import streamlit_js_eval

from app.ui import flush_notices, queue_notice, show_notice, wide_button
from config import load_settings
from logging_config import setup_logging
from report_client import FormValidationError, ReportClient, ReportRequestError
from visit_form import (
    GEOLOCATION_JS,
    MAX_ROUTE_PHOTOS,
    PDF_READY,
    RENDER_FAILED,
    PermitType,
    PhotoFile,
    VisitForm,
    read_geolocation,
)

# ---------------- App Config ----------------

st.set_page_config(page_title="Site Visit", layout="centered")
st.title("📋 Site Visit")

settings = load_settings()
if not st.session_state.get("_logging_ready"):
    setup_logging(settings)
    st.session_state["_logging_ready"] = True

IMAGE_TYPES = ["jpg", "jpeg", "png"]

form: VisitForm = st.session_state.setdefault("visit_form", VisitForm())

flush_notices()

# --- Project Information ---
st.subheader("1. Project Information")

# (field, label, placeholder)
TEXT_FIELDS: List[Tuple[str, str, str]] = [
    ("project_code", "Project code *", "e.g. PRJ-2025-001"),
    ("client_name", "Client name *", "Client name"),
    ("contact_name", "Contact name *", "Contact person"),
    ("contact_phone", "Contact phone", "+56 9 1234 5678"),
]

cols = st.columns(2)
for i, (name, label, placeholder) in enumerate(TEXT_FIELDS):
    with cols[i % 2]:
        value = st.text_input(label, key=f"f_{name}", placeholder=placeholder)
    form.set_field(name, value)

days = st.number_input(
    "Approx. construction days",
    min_value=1,
    step=1,
    value=None,
    placeholder="e.g. 15",
    key="f_construction_days",
)
form.set_field("construction_days", int(days) if days is not None else None)

# --- Location ---
st.subheader("2. Location")

if wide_button("📍 Get coordinates automatically", key="geo_btn"):
    st.session_state["_geo_request"] = st.session_state.get("_geo_request", 0) + 1

geo_request = st.session_state.get("_geo_request", 0)
if geo_request and st.session_state.get("_geo_done") != geo_request:
    # Single shot: one component key per click, None until the browser answers
    geo_result = streamlit_js_eval(js_expressions=GEOLOCATION_JS, key=f"geo_{geo_request}")
    if geo_result is None:
        st.caption("Getting location...")
    else:
        st.session_state["_geo_done"] = geo_request
        position, geo_notice = read_geolocation(geo_result)
        if position:
            form.apply_position(*position)
            # widgets below haven't been created yet on this pass
            st.session_state["f_latitude"] = form.latitude
            st.session_state["f_longitude"] = form.longitude
        show_notice(geo_notice)

lat_col, lon_col = st.columns(2)
with lat_col:
    form.set_field("latitude", st.text_input("Latitude (decimal) *", key="f_latitude", placeholder="-33.437916"))
with lon_col:
    form.set_field("longitude", st.text_input("Longitude (decimal) *", key="f_longitude", placeholder="-70.650641"))

map_link = form.maps_link(settings["maps_url_template"])
if map_link:
    st.markdown(f"[📍 View on Google Maps]({map_link})")

# --- Permits ---
st.subheader("3. Permits")

permits_answer = st.radio("Permits required? *", ["Yes", "No"], index=1, horizontal=True, key="f_permits")
form.set_field("permits_required", permits_answer == "Yes")

if form.permits_required:
    st.markdown("**Permit types**")
    for tag in PermitType:
        st.checkbox(
            tag.value.capitalize(),
            value=tag in form.permit_types,
            key=f"permit_{tag.value}",
            on_change=form.toggle_permit_type,
            args=(tag,),
        )

# --- Photos ---
st.subheader("4. Photos")

entry_upload = st.file_uploader("Fiber entry *", type=IMAGE_TYPES, key="f_entry_photo")
form.set_entry_photo(PhotoFile.from_upload(entry_upload) if entry_upload else None)

st.markdown("**Fiber route** (up to 3 photos)")
st.caption(f"{len(form.route_photos)}/{MAX_ROUTE_PHOTOS} photos")

for idx, photo in enumerate(form.route_photos):
    row = st.columns([1, 4, 1])
    with row[0]:
        st.image(photo.data, width=80)
    with row[1]:
        st.write(photo.name)
    with row[2]:
        if st.button("✖", key=f"rm_route_{idx}_{photo.name}"):
            form.remove_route_photo(idx)
            st.rerun()

# Fresh uploader key after each add so the widget resets
route_key = f"route_upload_{st.session_state.get('_route_upload_n', 0)}"
route_upload = st.file_uploader("Add route photo", type=IMAGE_TYPES, key=route_key)
if route_upload is not None:
    limit_notice = form.add_route_photo(PhotoFile.from_upload(route_upload))
    if limit_notice:
        queue_notice(limit_notice)
    st.session_state["_route_upload_n"] = st.session_state.get("_route_upload_n", 0) + 1
    st.rerun()

site_upload = st.file_uploader("Room where fiber arrives *", type=IMAGE_TYPES, key="f_site_photo")
form.set_site_photo(PhotoFile.from_upload(site_upload) if site_upload else None)

# ---------------- Submit -> Validate -> Build PDF ----------------

if wide_button("📄 Generate PDF", type="primary", key="generate_btn"):
    st.session_state.pop("_report", None)
    client = ReportClient(settings["api_url"], timeout=settings["request_timeout"])
    try:
        with st.spinner("Generating PDF..."):
            pdf_bytes, file_name = client.generate(form)
    except FormValidationError as e:
        show_notice(e.notice)
    except ReportRequestError:
        show_notice(RENDER_FAILED)
    else:
        st.session_state["_report"] = (pdf_bytes, file_name)
        show_notice(PDF_READY)

report = st.session_state.get("_report")
if report:
    st.download_button(
        label="📄 Download PDF Report",
        data=report[0],
        file_name=report[1],
        mime="application/pdf",
    )
