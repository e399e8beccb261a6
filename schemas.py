from __future__ import annotations

import math
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VisitRecord(BaseModel):
    """
    Visit Record as received by the render endpoint.

    Deliberately lenient: text fields may be missing (rendered as N/A),
    coordinates are kept as supplied, photo values are not checked here
    so a bad image only costs its own page.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    project_code: Optional[str] = Field(default=None, alias="projectCode")
    client_name: Optional[str] = Field(default=None, alias="clientName")
    contact_name: Optional[str] = Field(default=None, alias="contactName")
    contact_phone: Optional[str] = Field(default=None, alias="contactPhone")
    latitude: Any = None
    longitude: Any = None
    construction_days: Optional[int] = Field(default=None, alias="constructionDays")
    permits_required: bool = Field(default=False, alias="permitsRequired")
    permit_types: List[str] = Field(default_factory=list, alias="permitTypes")
    entry_photo: Any = Field(default=None, alias="entryPhoto")
    route_photos: List[Any] = Field(default_factory=list, alias="routePhotos")
    site_photo: Any = Field(default=None, alias="sitePhoto")

    @field_validator("project_code", "client_name", "contact_name", "contact_phone", mode="before")
    @classmethod
    def coerce_text(cls, v: Any):
        if v is None:
            return None
        return str(v)

    @field_validator("construction_days", mode="before")
    @classmethod
    def blank_days_to_none(cls, v: Any):
        # "" / 0 / negative mean "not provided"
        if v is None or (isinstance(v, str) and v.strip() == ""):
            return None
        try:
            number = float(str(v).strip())
        except ValueError:
            return None
        # 15.0 is a day count, 2.5 is not
        if not math.isfinite(number) or not number.is_integer():
            return None
        days = int(number)
        return days if days > 0 else None

    @field_validator("permits_required", mode="before")
    @classmethod
    def coerce_permits_flag(cls, v: Any):
        if isinstance(v, str):
            return v.strip().lower() in {"true", "yes", "si", "1"}
        return bool(v)

    @field_validator("permit_types", "route_photos", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any):
        return [] if v is None else v

    def photo_pages(self) -> List[tuple]:
        """(title, value) per photo page, in document order."""
        pages = []
        if self.entry_photo:
            pages.append(("FIBER ENTRY", self.entry_photo))
        for i, photo in enumerate(self.route_photos, start=1):
            pages.append((f"FIBER ROUTE {i}", photo))
        if self.site_photo:
            pages.append(("ROOM WHERE FIBER ARRIVES", self.site_photo))
        return pages
