"""Create/edit publication wizard: step definitions and validation.

Steps: general → location → price → images → review. `next_step` is blocked
until the current step validates; `validate_all` re-checks every step before
the review can be submitted and jumps back to the first failing one.

Prices live in the form as a cents digit string (see price_service).
"""
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel

from marketplace.core.exceptions import ValidationError
from marketplace.core.logging import get_logger
from marketplace.schemas.publication_form_schema import PublicationForm
from marketplace.schemas.publication_schema import AvailableTime, PublicationView
from marketplace.services.price_service import (
    display_price_to_cents_digits,
    dollars_to_cents_digits,
    format_price_input,
    is_positive_price,
    sanitize_price_input,
)

logger = get_logger(__name__)

DAYS_OF_WEEK = {
    1: "Lunes",
    2: "Martes",
    3: "Miércoles",
    4: "Jueves",
    5: "Viernes",
    6: "Sábado",
    7: "Domingo",
}

UploadFile = Tuple[str, bytes, str]


class FieldSpec(BaseModel):
    id: str
    label: str = ""
    type: str
    required: bool = False
    min: Optional[float] = None
    allow_decimals: bool = True
    fields: List["FieldSpec"] = []


class StepSpec(BaseModel):
    id: str
    title: str
    fields: List[FieldSpec] = []


STEPS: List[StepSpec] = [
    StepSpec(
        id="general",
        title="Información General",
        fields=[
            FieldSpec(id="title", label="Título del Aviso", type="text", required=True),
            FieldSpec(id="tipo", label="Tipo de Propiedad", type="text", required=True),
            FieldSpec(id="property_description", label="Descripción", type="textarea", required=True),
            FieldSpec(
                id="property_details",
                type="group",
                fields=[
                    FieldSpec(id="property_size", label="Tamaño (m²)", type="number",
                              required=True, min=0, allow_decimals=True),
                    FieldSpec(id="property_bedrooms", label="Dormitorios", type="number",
                              required=True, min=0, allow_decimals=False),
                    FieldSpec(id="property_floors", label="Plantas", type="number",
                              required=True, min=0, allow_decimals=False),
                    FieldSpec(id="property_parking", label="Estacionamientos", type="number",
                              required=True, min=0, allow_decimals=False),
                ],
            ),
            FieldSpec(id="property_furnished", label="Amueblado", type="checkbox"),
        ],
    ),
    StepSpec(
        id="location",
        title="Ubicación",
        fields=[
            FieldSpec(id="property_address", label="Dirección", type="text", required=True),
            FieldSpec(id="neighborhood", label="Barrio", type="text", required=True),
            FieldSpec(id="location_map", type="map", required=True),
        ],
    ),
    StepSpec(
        id="price",
        title="Precio y Disponibilidad",
        fields=[
            FieldSpec(id="property_price", label="Precio", type="price", required=True),
            FieldSpec(id="available_times", label="Horarios Disponibles", type="timeSlots", required=True),
        ],
    ),
    StepSpec(
        id="images",
        title="Imágenes",
        fields=[FieldSpec(id="files", label="Nuevas Imágenes (Opcional)", type="file")],
    ),
    StepSpec(id="review", title="Revisar Información"),
]

_INTEGER_FIELDS = ("property_bedrooms", "property_floors", "property_parking")
_LEADING_INT = re.compile(r"^\s*(\d+)")
_LEADING_FLOAT = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)")


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value is False


def validate_field(value: Any, spec: FieldSpec) -> Optional[str]:
    """Return the inline error message for one field, or None."""
    if spec.required and _is_blank(value):
        return f"{spec.label} es obligatorio"

    if _is_blank(value):
        return None

    if spec.type in ("text", "textarea") and isinstance(value, str):
        if not value.strip():
            return f"{spec.label} no puede estar vacío"
        if len(value.strip()) < 3:
            return f"{spec.label} debe tener al menos 3 caracteres"

    if spec.type == "number":
        try:
            number = float(value)
        except (TypeError, ValueError):
            return f"{spec.label} debe ser un número válido"
        if spec.min is not None and number < spec.min:
            return f"{spec.label} debe ser mayor o igual a {spec.min:g}"
        if number < 0:
            return f"{spec.label} no puede ser negativo"
        if not spec.allow_decimals and not number.is_integer():
            return f"{spec.label} debe ser un número entero"

    if spec.type == "price" and not is_positive_price(str(value)):
        return f"{spec.label} debe ser un valor válido mayor a 0"

    return None


_TIME_FORMATS = ("%H:%M:%S", "%H:%M")


def normalize_time(value: str) -> str:
    """"9:30" / "09:30" → "09:30:00"; seconds are kept when given.

    Raises ValidationError for anything that is not a clock time.
    """
    if not value:
        return "00:00:00"
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).strftime("%H:%M:%S")
        except ValueError:
            continue
    raise ValidationError(f"Hora inválida: {value}")


def _slot_key(slot: AvailableTime) -> tuple:
    return (slot.day_of_week, slot.start_time, slot.end_time, slot.id if slot.id is not None else -1)


def can_edit(user_id: Any, publication: PublicationView) -> bool:
    """Owners can edit; unknown ownership is left to the server to authorize."""
    if publication.publisher_id is None:
        return True
    return bool(user_id) and str(user_id) == str(publication.publisher_id)


class PublicationWizard:
    """Holds the form values, time slots and per-field errors of one wizard run."""

    def __init__(self, form: Optional[PublicationForm] = None):
        form = form or PublicationForm()
        self.values: Dict[str, Any] = form.model_dump(exclude={"available_times"})
        self.time_slots: List[AvailableTime] = [s.model_copy() for s in form.available_times]
        self.original_time_slots: List[AvailableTime] = [s.model_copy() for s in form.available_times]
        self.files: List[UploadFile] = []
        self.existing_images: List[str] = []
        self.errors: Dict[str, str] = {}
        self.current_step = 0

    # -----------------------------------------------------------------------
    # Loading
    # -----------------------------------------------------------------------

    @classmethod
    def from_publication(
        cls,
        publication: PublicationView,
        fallback_title: Optional[str] = None,
    ) -> "PublicationWizard":
        """Pre-fill the form from a publication fetched for editing."""
        if publication.property_price is not None:
            price = dollars_to_cents_digits(publication.property_price)
        else:
            price = display_price_to_cents_digits(publication.price)

        title = publication.property_title or fallback_title or ""

        def keep(value):
            return "" if value is None else value

        form = PublicationForm(
            title=title,
            tipo=publication.type_name or "",
            property_description=publication.description or "",
            property_size=keep(publication.size),
            property_bedrooms=keep(publication.bedrooms),
            property_floors=keep(publication.floors),
            property_parking=keep(publication.parking),
            property_furnished=bool(publication.furnished),
            property_address=publication.address or "",
            neighborhood=publication.neighborhood or "",
            municipality=publication.municipality or "",
            department=publication.department or "",
            latitude="" if publication.coordinates.lat is None else str(publication.coordinates.lat),
            longitude="" if publication.coordinates.lng is None else str(publication.coordinates.lng),
            property_price=price,
            available_times=publication.available_times,
        )
        wizard = cls(form)
        wizard.existing_images = list(publication.images)
        return wizard

    # -----------------------------------------------------------------------
    # Input
    # -----------------------------------------------------------------------

    def set_value(self, field_id: str, value: Any) -> None:
        self.errors.pop(field_id, None)

        if field_id == "property_size" and value != "":
            match = _LEADING_FLOAT.match(str(value).lstrip("-"))
            value = float(match.group(1)) if match else 0.0
        elif field_id in _INTEGER_FIELDS and value != "":
            match = _LEADING_INT.match(str(value).lstrip("-"))
            value = int(match.group(1)) if match else 0
        elif field_id == "property_furnished":
            value = bool(value)
        elif field_id == "property_price":
            value = sanitize_price_input(value)

        self.values[field_id] = value

    def set_location(self, latitude: float, longitude: float) -> None:
        self.errors.pop("location_map", None)
        self.values["latitude"] = str(latitude)
        self.values["longitude"] = str(longitude)

    def add_time_slot(self, day_of_week: Any, start_time: str, end_time: str) -> AvailableTime:
        if not day_of_week or not start_time or not end_time:
            raise ValidationError("Por favor complete todos los campos del horario")
        try:
            day = int(day_of_week)
        except (TypeError, ValueError):
            raise ValidationError("Día de la semana inválido")
        if day not in DAYS_OF_WEEK:
            raise ValidationError("Día de la semana inválido")

        start, end = normalize_time(start_time), normalize_time(end_time)
        if start >= end:
            raise ValidationError("La hora de fin debe ser posterior a la hora de inicio")

        slot = AvailableTime(day_of_week=day, start_time=start, end_time=end)
        self.time_slots.append(slot)
        self.errors.pop("available_times", None)
        return slot

    def remove_time_slot(self, index: int) -> None:
        del self.time_slots[index]

    def attach_images(self, files: List[UploadFile]) -> None:
        self.files = list(files)

    @property
    def price_display(self) -> str:
        return format_price_input(self.values.get("property_price"))

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------

    def _step_errors(self, step: StepSpec) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        for spec in step.fields:
            if spec.type == "group":
                for sub in spec.fields:
                    error = validate_field(self.values.get(sub.id), sub)
                    if error:
                        errors[sub.id] = error
            elif spec.type == "timeSlots":
                if not self.time_slots:
                    errors["available_times"] = "Debe agregar al menos un horario disponible"
            elif spec.type == "file":
                continue
            elif spec.type == "map":
                if not self.values.get("latitude") or not self.values.get("longitude"):
                    errors["location_map"] = "Debe seleccionar una ubicación en el mapa"
            else:
                error = validate_field(self.values.get(spec.id), spec)
                if error:
                    errors[spec.id] = error
        return errors

    def validate_step(self, index: int) -> bool:
        self.errors = self._step_errors(STEPS[index])
        return not self.errors

    def next_step(self) -> bool:
        """Advance when the current step validates; returns whether it moved."""
        if self.current_step >= len(STEPS) - 1:
            return False
        if not self.validate_step(self.current_step):
            logger.debug("Step '%s' blocked: %s", STEPS[self.current_step].id, list(self.errors))
            return False
        self.current_step += 1
        return True

    def previous_step(self) -> bool:
        if self.current_step == 0:
            return False
        self.current_step -= 1
        return True

    def validate_all(self) -> bool:
        """Re-validate every step before review; stops on the first failing one."""
        for index in range(len(STEPS) - 1):
            if not self.validate_step(index):
                self.current_step = index
                return False
        return True

    @property
    def is_review(self) -> bool:
        return self.current_step == len(STEPS) - 1

    # -----------------------------------------------------------------------
    # Submission
    # -----------------------------------------------------------------------

    def times_changed(self) -> bool:
        current = sorted(_slot_key(s) for s in self.time_slots)
        original = sorted(_slot_key(s) for s in self.original_time_slots)
        return current != original

    def build_form(self) -> PublicationForm:
        return PublicationForm(**self.values, available_times=self.time_slots)

    def submission(self) -> PublicationForm:
        """Form ready to send; raises ValidationError naming the first bad step."""
        if not self.validate_all():
            step = STEPS[self.current_step]
            raise ValidationError(
                f"Por favor complete correctamente el paso: {step.title}",
                errors=dict(self.errors),
            )
        return self.build_form()
