"""Image -> data-URI encoding and JSON payload assembly for the render request."""

from __future__ import annotations

import asyncio
import base64
from typing import Any, Dict, List, Optional, Sequence

from visit_form import PhotoFile, VisitForm


def to_data_uri(photo: PhotoFile) -> str:
    payload = base64.b64encode(photo.data).decode("ascii")
    return f"data:{photo.mime};base64,{payload}"


async def encode_photo(photo: Optional[PhotoFile]) -> Optional[str]:
    if photo is None:
        return None
    return await asyncio.to_thread(to_data_uri, photo)


async def encode_photos(photos: Sequence[PhotoFile]) -> List[str]:
    """
    Encode all photos concurrently. gather() keeps results in input order,
    whichever read finishes first.
    """
    return list(await asyncio.gather(*(encode_photo(p) for p in photos)))


async def build_payload(form: VisitForm) -> Dict[str, Any]:
    """JSON-ready Visit Record with every image encoded."""
    entry, route, site = await asyncio.gather(
        encode_photo(form.entry_photo),
        encode_photos(form.route_photos),
        encode_photo(form.site_photo),
    )
    return {
        "projectCode": form.project_code.strip(),
        "clientName": form.client_name.strip(),
        "contactName": form.contact_name.strip(),
        "contactPhone": (form.contact_phone or "").strip(),
        "latitude": str(form.latitude).strip(),
        "longitude": str(form.longitude).strip(),
        "constructionDays": form.construction_days,
        "permitsRequired": bool(form.permits_required),
        "permitTypes": form.selected_permit_types(),
        "entryPhoto": entry,
        "routePhotos": route,
        "sitePhoto": site,
    }
