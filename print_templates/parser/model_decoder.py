"""Decode loosely-typed JSON payloads into document models and back.

Decoding never raises: it returns a :class:`DecodeResult` tagged with either the
model or the typed error, so the importer and the store listing can branch on the
outcome instead of relying on exception control flow.
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Type, Union

from print_templates.model.document_model import (
    PORTRAIT,
    DocumentModel,
    DocumentObject,
    Geometry,
)
from print_templates.model.errors import DocumentError, ParseError, ValidationError

# JSON key -> attribute name, in canonical output order.
MODEL_FIELDS: Dict[str, str] = {
    "version": "version",
    "title": "title",
    "pageOrientation": "page_orientation",
    "fontFamily": "font_family",
    "fontSize": "font_size",
    "pageMargin": "page_margin",
    "backgroundImage": "background_image",
    "backgroundOpacity": "background_opacity",
    "content": "content",
    "objects": "objects",
    "totalPages": "total_pages",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

OBJECT_FIELDS: Dict[str, str] = {
    "id": "id",
    "type": "type",
    "x": "x",
    "y": "y",
    "width": "width",
    "height": "height",
    "bgColor": "bg_color",
    "borderColor": "border_color",
    "borderWidth": "border_width",
    "text": "text",
    "textAlign": "text_align",
    "textVAlign": "text_v_align",
}

_GEOMETRY_KEYS = ("x", "y", "width", "height")


@dataclass(slots=True)
class DecodeResult:
    """Tagged outcome of a decode step."""

    model: Optional[DocumentModel] = None
    error: Optional[DocumentError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.model is not None


def decode_bytes(
    raw: Union[bytes, str],
    name: Optional[str] = None,
    *,
    error_type: Type[DocumentError] = ValidationError,
) -> DecodeResult:
    """Parse UTF-8 JSON bytes; ``error_type`` picks ValidationError or ParseError."""
    try:
        text = raw.decode("utf-8-sig") if isinstance(raw, bytes) else raw
        payload = json.loads(text)
    except (UnicodeDecodeError, ValueError) as exc:
        return DecodeResult(error=error_type(f"Document {name!r} is not valid JSON: {exc}", name))
    return decode_payload(payload, name, error_type=error_type)


def decode_payload(
    payload: object,
    name: Optional[str] = None,
    *,
    error_type: Type[DocumentError] = ValidationError,
) -> DecodeResult:
    """Build a :class:`DocumentModel` from an already parsed JSON value."""
    if not isinstance(payload, Mapping):
        return DecodeResult(error=error_type(f"Document {name!r} must be a JSON object", name))

    raw_objects = payload.get("objects")
    if not isinstance(raw_objects, list):
        return DecodeResult(error=error_type(f"Document {name!r} has no 'objects' array", name))

    objects: List[DocumentObject] = []
    for index, raw_object in enumerate(raw_objects):
        if not isinstance(raw_object, Mapping):
            return DecodeResult(
                error=error_type(f"Document {name!r}: object #{index} is not a JSON object", name)
            )
        objects.append(_decode_object(raw_object, index))

    model = DocumentModel(
        title=_string(payload.get("title")),
        page_orientation=_string(payload.get("pageOrientation")) or PORTRAIT,
        font_family=_optional_string(payload.get("fontFamily")),
        font_size=_number(payload.get("fontSize")),
        page_margin=_number(payload.get("pageMargin")),
        background_image=_optional_string(payload.get("backgroundImage")),
        background_opacity=_number(payload.get("backgroundOpacity")),
        content=_string(payload.get("content")),
        objects=objects,
        total_pages=_total_pages(payload.get("totalPages")),
        created_at=_optional_string(payload.get("createdAt")),
        updated_at=_optional_string(payload.get("updatedAt")),
        version=_optional_string(payload.get("version")),
        extra={key: value for key, value in payload.items() if key not in MODEL_FIELDS},
    )
    return DecodeResult(model=model)


def encode_model(model: DocumentModel) -> Dict[str, object]:
    """Return the flat interchange dictionary for ``model``."""
    payload: Dict[str, object] = {}
    for key, attr in MODEL_FIELDS.items():
        if attr == "objects":
            payload[key] = [encode_object(obj) for obj in model.objects]
        elif attr == "version" and model.version is None:
            continue
        else:
            payload[key] = getattr(model, attr)
    for key, value in model.extra.items():
        payload.setdefault(key, value)
    return payload


def encode_object(obj: DocumentObject) -> Dict[str, object]:
    payload: Dict[str, object] = {}
    for key, attr in OBJECT_FIELDS.items():
        if key in _GEOMETRY_KEYS:
            payload[key] = getattr(obj.geometry, attr)
            continue
        value = getattr(obj, attr)
        if value is not None:
            payload[key] = value
    for key, value in obj.extra.items():
        payload.setdefault(key, value)
    return payload


def dump_model(model: DocumentModel) -> bytes:
    """Serialize ``model`` to the canonical interchange bytes."""
    return json.dumps(encode_model(model), indent=2, ensure_ascii=False).encode("utf-8")


def _decode_object(raw: Mapping[str, object], index: int) -> DocumentObject:
    geometry = Geometry(
        x=_number(raw.get("x"), 0),
        y=_number(raw.get("y"), 0),
        width=_number(raw.get("width"), 0),
        height=_number(raw.get("height"), 0),
    )
    raw_id = raw.get("id")
    return DocumentObject(
        id=str(raw_id) if raw_id is not None else f"object-{index}",
        type=_string(raw.get("type")) or "text",
        geometry=geometry,
        bg_color=_optional_string(raw.get("bgColor")),
        border_color=_optional_string(raw.get("borderColor")),
        border_width=_number(raw.get("borderWidth")),
        text=_optional_string(raw.get("text")),
        text_align=_optional_string(raw.get("textAlign")),
        text_v_align=_optional_string(raw.get("textVAlign")),
        extra={key: value for key, value in raw.items() if key not in OBJECT_FIELDS},
    )


def _string(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _optional_string(value: object) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _number(value: object, default: Optional[float] = None) -> Optional[float]:
    """Numeric value or ``default``; NaN and infinities count as missing."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return default
    if isinstance(value, float):
        return value if math.isfinite(value) else default
    return default


def _total_pages(value: object) -> int:
    number = _number(value, 1)
    return max(1, int(number))
