"""
Client-side state for one site visit.

Exports:
- VisitForm: the Visit Record as mutable UI state (setters, photos, validation gate)
- PhotoFile, PermitType, Notice
- GEOLOCATION_JS / read_geolocation(): browser position request + error mapping
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from config import maps_url

MAX_ROUTE_PHOTOS = 3

# Browser geolocation request options
GEO_TIMEOUT_MS = 10000
GEO_HIGH_ACCURACY = True


class PermitType(str, Enum):
    MUNICIPAL = "municipal"
    SERVIU = "serviu"
    MOP = "mop"
    BUILDING = "building"


@dataclass(frozen=True)
class Notice:
    """A transient user-facing message."""

    title: str
    description: str
    variant: str = "destructive"  # or "default"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


@dataclass(frozen=True)
class PhotoFile:
    name: str
    data: bytes
    mime: str = "image/jpeg"

    @classmethod
    def from_upload(cls, uploaded: Any) -> "PhotoFile":
        """Wrap a Streamlit UploadedFile (anything with name/getvalue/type)."""
        mime = getattr(uploaded, "type", None) or "image/jpeg"
        return cls(name=uploaded.name, data=uploaded.getvalue(), mime=mime)


def parse_coordinate(value: Any) -> Optional[float]:
    """Float for finite numeric input, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        num = float(str(value).strip())
    except ValueError:
        return None
    return num if math.isfinite(num) else None


# ---------------- Notices ----------------

MISSING_FIELDS = Notice(
    "Required fields",
    "Please fill in all required fields",
)
INVALID_COORDINATES = Notice(
    "Invalid coordinates",
    "Please enter valid coordinates",
)
MISSING_PHOTOS = Notice(
    "Photos required",
    "Upload at least the entry photo and the site photo",
)
ROUTE_LIMIT_REACHED = Notice(
    "Limit reached",
    f"You can only add up to {MAX_ROUTE_PHOTOS} route photos",
)
RENDER_FAILED = Notice("Error", "Could not generate the PDF")
PDF_READY = Notice(
    "PDF generated",
    "The report is ready, use the button below to download it",
    variant="default",
)


@dataclass
class VisitForm:
    project_code: str = ""
    client_name: str = ""
    contact_name: str = ""
    contact_phone: str = ""
    latitude: str = ""
    longitude: str = ""
    construction_days: Optional[int] = None
    permits_required: bool = False
    permit_types: List[PermitType] = field(default_factory=list)
    entry_photo: Optional[PhotoFile] = None
    route_photos: List[PhotoFile] = field(default_factory=list)
    site_photo: Optional[PhotoFile] = None

    REQUIRED_TEXT = ("project_code", "client_name", "contact_name")

    # ---- setters ----

    def set_field(self, name: str, value: Any) -> None:
        if name not in {f.name for f in fields(self)}:
            raise KeyError(name)
        setattr(self, name, value)

    def toggle_permit_type(self, tag: Any) -> None:
        tag = PermitType(tag)
        if tag in self.permit_types:
            self.permit_types = [t for t in self.permit_types if t != tag]
        else:
            self.permit_types = self.permit_types + [tag]

    def set_entry_photo(self, photo: Optional[PhotoFile]) -> None:
        self.entry_photo = photo

    def set_site_photo(self, photo: Optional[PhotoFile]) -> None:
        self.site_photo = photo

    def add_route_photo(self, photo: PhotoFile) -> Optional[Notice]:
        """Append a route photo; returns a notice instead when the cap is hit."""
        if len(self.route_photos) >= MAX_ROUTE_PHOTOS:
            return ROUTE_LIMIT_REACHED
        self.route_photos = self.route_photos + [photo]
        return None

    def remove_route_photo(self, index: int) -> None:
        self.route_photos = [p for i, p in enumerate(self.route_photos) if i != index]

    def apply_position(self, lat: float, lon: float) -> None:
        self.latitude = f"{lat:.6f}"
        self.longitude = f"{lon:.6f}"

    # ---- derived values ----

    def coordinates(self) -> Optional[Tuple[float, float]]:
        lat = parse_coordinate(self.latitude)
        lon = parse_coordinate(self.longitude)
        if lat is None or lon is None:
            return None
        if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
            return None
        return lat, lon

    def maps_link(self, template: Optional[str] = None) -> str:
        if not (str(self.latitude).strip() and str(self.longitude).strip()):
            return ""
        return maps_url(str(self.latitude).strip(), str(self.longitude).strip(), template)

    def selected_permit_types(self) -> List[str]:
        if not self.permits_required:
            return []
        return [PermitType(t).value for t in self.permit_types]

    # ---- validation gate ----

    def missing_required(self) -> List[str]:
        missing: List[str] = []
        for name in self.REQUIRED_TEXT:
            v = getattr(self, name)
            if v is None or (isinstance(v, str) and v.strip() == ""):
                missing.append(name)
        return missing

    def validate(self) -> Optional[Notice]:
        """First failing check as a Notice, or None when ready to submit."""
        if self.missing_required():
            return MISSING_FIELDS
        if self.coordinates() is None:
            return INVALID_COORDINATES
        if self.entry_photo is None or self.site_photo is None:
            return MISSING_PHOTOS
        return None


# ---------------- Geolocation ----------------

# Evaluated in the browser by streamlit_js_eval; resolves to either
# {"coords": {...}} or {"error": {"code": n, "message": "..."}}.
GEOLOCATION_JS = """
new Promise((resolve) => {
  if (!navigator.geolocation) {
    resolve({error: {code: 0, message: "unsupported"}});
    return;
  }
  navigator.geolocation.getCurrentPosition(
    (pos) => resolve({coords: {latitude: pos.coords.latitude, longitude: pos.coords.longitude}}),
    (err) => resolve({error: {code: err.code, message: err.message}}),
    {enableHighAccuracy: %s, timeout: %d, maximumAge: 0}
  );
})
""" % ("true" if GEO_HIGH_ACCURACY else "false", GEO_TIMEOUT_MS)

GEO_UNSUPPORTED = Notice(
    "Geolocation unavailable",
    "Your browser does not support geolocation",
)
GEO_ERRORS: Dict[int, str] = {
    1: "Location permission denied",
    2: "Location unavailable",
    3: "Location request timed out",
}
GEO_GENERIC_ERROR = "Could not get the location"
GEO_SUCCESS = Notice(
    "Location acquired",
    "Coordinates were updated",
    variant="default",
)


def geolocation_error_notice(code: Any) -> Notice:
    if code == 0:
        return GEO_UNSUPPORTED
    try:
        msg = GEO_ERRORS.get(int(code), GEO_GENERIC_ERROR)
    except (TypeError, ValueError):
        msg = GEO_GENERIC_ERROR
    return Notice("Geolocation error", msg)


def read_geolocation(result: Any) -> Tuple[Optional[Tuple[float, float]], Notice]:
    """
    Interpret the browser's answer to GEOLOCATION_JS.

    Returns ((lat, lon), success notice) or (None, error notice).
    """
    if not isinstance(result, dict):
        return None, Notice("Geolocation error", GEO_GENERIC_ERROR)

    err = result.get("error")
    if err:
        code = err.get("code") if isinstance(err, dict) else None
        return None, geolocation_error_notice(code)

    coords = result.get("coords") or {}
    lat = parse_coordinate(coords.get("latitude"))
    lon = parse_coordinate(coords.get("longitude"))
    if lat is None or lon is None:
        return None, Notice("Geolocation error", GEO_GENERIC_ERROR)
    return (lat, lon), GEO_SUCCESS
