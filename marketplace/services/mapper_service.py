"""Mapper service: turns server DTOs into flat view models.

One pure function per entity:
- publication_from_dto: admin feed, public feed, detail, home feeds
- favorite_from_dto: favorites page (keyed by publicationId)
- report_from_dto: admin reports page
- profile_from_dto: public profile, privacy-gated
- page_from_dto: Spring-style page envelope → Page[T]

Plus the display helpers shared by the admin pages:
- display_status: REPORTED > raw status > "DESCONOCIDO"
- format_display_price: 230000 → "$230,000"

Title policy differs per feed, selected through TitleStrategy.
"""
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar

from marketplace.config import settings
from marketplace.core.exceptions import InvalidResponseError
from marketplace.core.logging import get_logger
from marketplace.core.messages import INVALID_FORMAT, UNKNOWN_STATUS
from marketplace.schemas.base_schema import Page
from marketplace.schemas.profile_schema import UserProfileView
from marketplace.schemas.publication_schema import (
    AvailableTime,
    Coordinates,
    PublicationStatus,
    PublicationView,
)
from marketplace.schemas.report_schema import ReportStatus, ReportView

logger = get_logger(__name__)

T = TypeVar("T")


class TitleStrategy(str, Enum):
    PROPERTY = "property"                # propertyTitle or ""
    GENERATED = "generated"              # "{typeName} en {neighborhood}"
    PROPERTY_OR_GENERATED = "fallback"   # propertyTitle, else generated


# ---------------------------------------------------------------------------
# Status helpers
# ---------------------------------------------------------------------------

_PUBLICATION_LABELS = {
    PublicationStatus.ACTIVE.value: "ACTIVA",
    PublicationStatus.INACTIVE.value: "INACTIVA",
    PublicationStatus.REPORTED.value: "REPORTADA",
}

_REPORT_LABELS = {
    ReportStatus.PENDING.value: "PENDIENTE",
    ReportStatus.RESOLVED.value: "RESUELTO",
    ReportStatus.REJECTED.value: "RECHAZADO",
    ReportStatus.UNKNOWN.value: UNKNOWN_STATUS,
}


def display_status(publication: Any) -> str:
    """Status shown in the admin UI: REPORTED wins over the raw status."""
    status = _attr(publication, "status")
    is_reported = _attr(publication, "is_reported")
    if is_reported or status == PublicationStatus.REPORTED.value:
        return PublicationStatus.REPORTED.value
    return status or UNKNOWN_STATUS


def status_label(publication: Any) -> str:
    """Localized badge label for a publication."""
    status = display_status(publication)
    return _PUBLICATION_LABELS.get(status, status)


def report_status_label(status: Any) -> str:
    value = status.value if isinstance(status, Enum) else status
    return _REPORT_LABELS.get(value, _REPORT_LABELS[ReportStatus.REJECTED.value])


def _attr(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


# ---------------------------------------------------------------------------
# Scalar parsing
# ---------------------------------------------------------------------------

_DATE_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%d/%m/%Y",
]


def parse_date(raw: Any) -> Optional[datetime]:
    """Parse a server timestamp in the formats the backend emits."""
    if not raw:
        return None
    if isinstance(raw, datetime):
        return raw
    text = str(raw).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    logger.warning("Failed to parse date: '%s'", raw)
    return None


def format_display_price(amount: Any) -> str:
    """230000 → "$230,000"; 1500.5 → "$1,500.5" (up to 3 decimals, no padding)."""
    if amount is None or amount == "":
        return ""
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        return f"{settings.currency_symbol}{amount}"
    value = value.quantize(Decimal("0.001"))
    whole = int(value)
    fraction = str(abs(value - whole)).split(".")[-1].rstrip("0") if value != whole else ""
    formatted = f"{whole:,}"
    if fraction:
        formatted = f"{formatted}.{fraction}"
    return f"{settings.currency_symbol}{formatted}"


def _to_float(raw: Any) -> Optional[float]:
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def resolve_publisher_id(dto: Dict[str, Any]) -> Any:
    """Owner id under whichever key the endpoint used."""
    user = dto.get("user")
    user_id = user.get("id") if isinstance(user, dict) else None
    return (
        dto.get("userId")
        or dto.get("ownerId")
        or user_id
        or dto.get("publisherId")
        or None
    )


def _available_times(raw: Optional[List[Dict[str, Any]]]) -> List[AvailableTime]:
    slots = []
    for slot in raw or []:
        try:
            slots.append(
                AvailableTime(
                    id=slot.get("id"),
                    day_of_week=int(slot.get("dayOfWeek")),
                    start_time=slot.get("startTime") or "",
                    end_time=slot.get("endTime") or "",
                )
            )
        except (TypeError, ValueError) as e:
            logger.warning("Skipping malformed time slot %s: %s", slot, str(e))
    return slots


def _generated_title(dto: Dict[str, Any]) -> str:
    return f"{dto.get('typeName')} en {dto.get('neighborhood')}"


def _title(dto: Dict[str, Any], strategy: TitleStrategy) -> str:
    property_title = dto.get("propertyTitle")
    if strategy is TitleStrategy.GENERATED:
        return _generated_title(dto)
    if strategy is TitleStrategy.PROPERTY_OR_GENERATED:
        return property_title or _generated_title(dto)
    return property_title if property_title is not None else ""


# ---------------------------------------------------------------------------
# Entity mappers
# ---------------------------------------------------------------------------

def publication_from_dto(
    dto: Dict[str, Any],
    *,
    title: TitleStrategy = TitleStrategy.PROPERTY,
    is_new: bool = False,
    favorited: bool = False,
    id_key: str = "id",
) -> PublicationView:
    """Map a publication DTO (any feed) into a PublicationView."""
    images = dto.get("propertyImageUrls") or []
    municipality = dto.get("municipality")
    department = dto.get("department")
    property_title = dto.get("propertyTitle")

    return PublicationView(
        id=dto.get(id_key),
        title=_title(dto, title),
        property_title=property_title or "",
        type_name=dto.get("typeName") or "",
        description=dto.get("propertyDescription"),
        price=format_display_price(dto.get("propertyPrice")),
        property_price=_to_float(dto.get("propertyPrice")),
        location=f"{municipality}, {department}",
        address=dto.get("propertyAddress"),
        neighborhood=dto.get("neighborhood"),
        municipality=municipality,
        department=department,
        bedrooms=dto.get("propertyBedrooms"),
        floors=dto.get("propertyFloors"),
        size=_to_float(dto.get("propertySize")),
        parking=dto.get("propertyParking"),
        furnished=dto.get("propertyFurnished"),
        image_url=images[0] if images else settings.placeholder_image,
        images=list(images),
        coordinates=Coordinates(
            lat=_to_float(dto.get("latitude")),
            lng=_to_float(dto.get("longitude")),
        ),
        available_times=_available_times(dto.get("availableTimes")),
        publisher_id=resolve_publisher_id(dto),
        publisher_name=dto.get("userName") or dto.get("ownerName"),
        user_email=dto.get("userEmail") or None,
        user_phone_number=dto.get("userPhoneNumber") or None,
        status=dto.get("status") or PublicationStatus.ACTIVE.value,
        is_reported=bool(dto.get("isReported")),
        report_count=dto.get("reportCount") or 0,
        is_new=is_new,
        favorited=favorited,
        created_at=parse_date(dto.get("createdAt")),
        updated_at=parse_date(dto.get("updatedAt")),
    )


def favorite_from_dto(dto: Dict[str, Any]) -> PublicationView:
    """Favorites carry the publication under `publicationId` and are always favorited."""
    return publication_from_dto(
        dto,
        title=TitleStrategy.GENERATED,
        favorited=True,
        id_key="publicationId",
    )


def report_from_dto(dto: Dict[str, Any]) -> ReportView:
    raw_status = dto.get("status") or ReportStatus.PENDING.value
    try:
        status = ReportStatus(raw_status)
    except ValueError:
        logger.warning("Unknown report status '%s' for report %s", raw_status, dto.get("id"))
        status = ReportStatus.UNKNOWN

    return ReportView(
        id=dto.get("id"),
        publication_id=dto.get("publicationId"),
        reporter_name=dto.get("reporterName") or None,
        reason=dto.get("reason"),
        description=dto.get("description") or None,
        report_date=parse_date(dto.get("reportDate") or dto.get("createdAt")),
        status=status,
        raw_status=str(raw_status),
        admin_feedback=dto.get("adminFeedback") or dto.get("feedback") or None,
        resolved_at=parse_date(dto.get("resolvedAt")),
    )


def profile_from_dto(dto: Dict[str, Any]) -> UserProfileView:
    """Public profile; email/phone are dropped unless the owner opted in."""
    show_email = bool(dto.get("showEmail"))
    show_phone = bool(dto.get("showPhone"))
    return UserProfileView(
        id=dto.get("id"),
        name=dto.get("name") or "Usuario",
        email=(dto.get("email") or None) if show_email else None,
        phone=(dto.get("phone") or None) if show_phone else None,
        profile_picture=dto.get("profilePicture") or None,
        bio=dto.get("bio") or None,
        show_email=show_email,
        show_phone=show_phone,
        join_date=parse_date(dto.get("joinDate")),
        total_publications=dto.get("totalPublications") or 0,
    )


def page_from_dto(
    body: Any,
    mapper: Callable[[Dict[str, Any]], T],
    page_size: Optional[int] = None,
) -> Page[T]:
    """Map a Spring page (`content/number/totalPages/totalElements/size`).

    An empty body is an empty page. Anything else that is not a page
    envelope raises InvalidResponseError.
    """
    if body is None:
        body = {}
    content = body.get("content") if isinstance(body, dict) else None
    if not isinstance(body, dict) or not isinstance(content, (list, type(None))):
        logger.error("Expected a page envelope, got %s", type(body).__name__)
        raise InvalidResponseError(INVALID_FORMAT, detail=body)

    return Page(
        items=[mapper(item) for item in content or []],
        current_page=body.get("number") or 0,
        total_pages=body.get("totalPages") or 0,
        total_elements=body.get("totalElements") or 0,
        page_size=page_size or body.get("size"),
    )
