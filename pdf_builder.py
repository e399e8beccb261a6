import base64
import binascii
import logging
import math
from io import BytesIO
from typing import Any, Optional, Tuple

from PIL import Image
from fpdf import FPDF

from config import maps_url
from schemas import VisitRecord
from text_utils import report_file_name, sanitize

logger = logging.getLogger(__name__)


# ---------------- PDF Layout Constants ----------------

PLACEHOLDER = "N/A"

MARGIN = 20
TITLE_Y = 20
HR_Y = 28
GRID_TOP = 40
ROW_STEP = 18
FIELD_W = 85
FIELD_H = 12
VALUE_OFFSET = 5
PHOTO_TOP = 35
PHOTO_BAND = 60  # vertical space reserved around the photo box

BLACK = (0, 0, 0)
LINK_BLUE = (0, 0, 255)
ERROR_RED = (200, 0, 0)
LINE_GRAY = (200, 200, 200)

TITLE_PREFIX = "SITE VISIT - PROJECT: "
IMAGE_ERROR_CAPTION = "Error loading image"
MAP_LINK_TEXT = "View on Google Maps"


def format_coordinates(lat: Any, lon: Any) -> str:
    """'lat, lon' fixed to 6 decimals, or N/A when either is not numeric."""
    try:
        lat_f = float(str(lat).strip())
        lon_f = float(str(lon).strip())
    except (TypeError, ValueError):
        return PLACEHOLDER
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return PLACEHOLDER
    return f"{lat_f:.6f}, {lon_f:.6f}"


def _as_supplied(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def set_text_color(pdf: FPDF, rgb: Tuple[int, int, int]) -> None:
    r, g, b = rgb
    pdf.set_text_color(r, g, b)


def set_draw_color(pdf: FPDF, rgb: Tuple[int, int, int]) -> None:
    r, g, b = rgb
    pdf.set_draw_color(r, g, b)


def usable_width(pdf: FPDF) -> float:
    return pdf.w - 2 * MARGIN


def fit_text(pdf: FPDF, text: str, max_w: float) -> str:
    """Truncate with '...' so text fits max_w in the current font."""
    if pdf.get_string_width(text) <= max_w:
        return text
    ellipsis = "..."
    # the narrowest core-font glyphs bound how many characters can fit
    narrowest = min(pdf.get_string_width(ch) for ch in "il.,'|")
    text = text[: int(max_w / narrowest) + 1] if narrowest > 0 else text
    # longest prefix that still fits next to the ellipsis
    lo, hi = 0, len(text)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if pdf.get_string_width(text[:mid] + ellipsis) <= max_w:
            lo = mid
        else:
            hi = mid - 1
    return text[:lo] + ellipsis


def centered_text(pdf: FPDF, y: float, text: str) -> None:
    x = (pdf.w - pdf.get_string_width(text)) / 2.0
    pdf.text(x, y, text)


def draw_hr(pdf: FPDF, y: float, thickness: float = 0.5) -> None:
    set_draw_color(pdf, BLACK)
    pdf.set_line_width(thickness)
    pdf.line(MARGIN, y, pdf.w - MARGIN, y)


def page_title(pdf: FPDF, title: str, size: float = 18) -> None:
    pdf.set_font("Helvetica", "B", size)
    set_text_color(pdf, BLACK)
    centered_text(pdf, TITLE_Y, sanitize(title))


def draw_field(pdf: FPDF, label: str, value: Any, x: float, y: float, width: float = FIELD_W) -> None:
    """Bold label at (x, y), value on the line below, thin box around both."""
    inner_w = width - 4
    pdf.set_font("Helvetica", "B", 10)
    set_text_color(pdf, BLACK)
    pdf.text(x, y, fit_text(pdf, sanitize(label), inner_w))

    shown = sanitize(value).strip() if value not in (None, "") else ""
    pdf.set_font("Helvetica", "", 10)
    pdf.text(x, y + VALUE_OFFSET, fit_text(pdf, shown or PLACEHOLDER, inner_w))

    set_draw_color(pdf, LINE_GRAY)
    pdf.set_line_width(0.2)
    pdf.rect(x - 2, y - 4, width, FIELD_H)


def draw_link(pdf: FPDF, text: str, url: str, x: float, y: float) -> None:
    """Blue text at baseline y with a clickable area over it."""
    pdf.set_font("Helvetica", "", 10)
    set_text_color(pdf, LINK_BLUE)
    pdf.text(x, y, text)
    text_w = pdf.get_string_width(text)
    # font_size is in user units (mm)
    text_h = pdf.font_size
    pdf.link(x, y - text_h, text_w, text_h + 1, url)
    set_text_color(pdf, BLACK)


def write_summary_page(pdf: FPDF, record: VisitRecord, maps_template: Optional[str] = None) -> None:
    pdf.add_page()
    page_title(pdf, f"{TITLE_PREFIX}{record.project_code or PLACEHOLDER}")
    draw_hr(pdf, HR_Y)

    x_left = MARGIN
    x_right = pdf.w / 2 + 5
    y = GRID_TOP

    draw_field(pdf, "Project Code:", record.project_code, x_left, y)
    draw_field(pdf, "Client Name:", record.client_name, x_right, y)
    y += ROW_STEP

    draw_field(pdf, "Contact Name:", record.contact_name, x_left, y)
    draw_field(pdf, "Contact Phone:", record.contact_phone, x_right, y)
    y += ROW_STEP

    coords = format_coordinates(record.latitude, record.longitude)
    draw_field(pdf, "Coordinates:", coords, x_left, y)
    if coords != PLACEHOLDER:
        url = maps_url(_as_supplied(record.latitude), _as_supplied(record.longitude), maps_template)
        draw_link(pdf, MAP_LINK_TEXT, url, x_right, y + VALUE_OFFSET)
    y += ROW_STEP

    if record.construction_days:
        draw_field(pdf, "Approx. Construction Days:", f"{record.construction_days} days", x_left, y)
        y += ROW_STEP

    draw_field(pdf, "Permits:", "Yes" if record.permits_required else "No", x_left, y)
    if record.permits_required and record.permit_types:
        types = ", ".join(str(t) for t in record.permit_types).upper()
        draw_field(pdf, "Permit Types:", types, x_right, y)


def decode_image(value: Any) -> Image.Image:
    """
    Decode a data-URI (or bare base64) photo into a loaded RGB image.
    Raises ValueError for anything that is not a readable image.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("photo is not a base64 string")
    raw = value.strip()
    if raw.startswith("data:"):
        header, sep, raw = raw.partition(",")
        if not sep or ";base64" not in header:
            raise ValueError("photo data URI is not base64 encoded")
    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"invalid base64 payload: {e}") from e
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except OSError as e:
        raise ValueError(f"unreadable image: {e}") from e
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    return img


def fit_box(w_img: float, h_img: float, max_w: float, max_h: float) -> Tuple[float, float]:
    scale = min(max_w / w_img, max_h / h_img)
    return w_img * scale, h_img * scale


def add_photo_page(pdf: FPDF, title: str, value: Any) -> bool:
    """
    New page with a title and the photo fitted into the page box.
    Returns False (and leaves an error caption) when the photo can't be embedded.
    """
    pdf.add_page()
    page_title(pdf, title, size=14)

    box_w = usable_width(pdf)
    box_h = pdf.h - PHOTO_BAND
    try:
        img = decode_image(value)
        draw_w, draw_h = fit_box(img.width, img.height, box_w, box_h)
        x = MARGIN + (box_w - draw_w) / 2.0
        pdf.image(img, x=x, y=PHOTO_TOP, w=draw_w, h=draw_h)
        return True
    except Exception as e:
        logger.warning("Could not embed photo %r: %s", title, e)
        pdf.set_font("Helvetica", "", 10)
        set_text_color(pdf, ERROR_RED)
        centered_text(pdf, pdf.h / 2, IMAGE_ERROR_CAPTION)
        set_text_color(pdf, BLACK)
        return False


def build_visit_pdf(record: VisitRecord, maps_template: Optional[str] = None) -> Tuple[bytes, str]:
    """
    Render the site visit report and return (bytes, filename).

    Page 1 holds the field grid; every supplied photo gets its own page
    (entry, route photos in order, site). A photo that fails to embed keeps
    its page with an error caption.
    """
    pdf = FPDF(orientation="P", unit="mm", format="A4")
    # fixed layout: never let fpdf insert pages on its own
    pdf.set_auto_page_break(auto=False)
    pdf.set_title(sanitize(f"Site Visit {record.project_code or ''}".strip()))
    pdf.set_creator("Site Visit Report")

    write_summary_page(pdf, record, maps_template)

    failed = 0
    for title, value in record.photo_pages():
        if not add_photo_page(pdf, title, value):
            failed += 1

    pdf_bytes = bytes(pdf.output())
    logger.info(
        "Rendered report for project %r: %d pages, %d photo(s) failed",
        record.project_code,
        pdf.page_no(),
        failed,
    )
    return pdf_bytes, report_file_name(record.project_code)
