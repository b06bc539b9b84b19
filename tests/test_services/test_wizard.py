"""Tests for the edit wizard: step validation, time slots, form encoding."""
import pytest

from marketplace.core.exceptions import ValidationError
from marketplace.services.mapper_service import publication_from_dto
from marketplace.services.wizard_service import (
    FieldSpec,
    PublicationWizard,
    can_edit,
    normalize_time,
    validate_field,
)
from tests.conftest import make_publication_dto


def _wizard(**overrides) -> PublicationWizard:
    return PublicationWizard.from_publication(publication_from_dto(make_publication_dto(**overrides)))


class TestValidateField:
    def test_required(self):
        spec = FieldSpec(id="title", label="Título del Aviso", type="text", required=True)
        assert validate_field("", spec) == "Título del Aviso es obligatorio"
        assert validate_field(None, spec) == "Título del Aviso es obligatorio"

    def test_whitespace_and_length(self):
        spec = FieldSpec(id="title", label="Título", type="text", required=True)
        assert validate_field("   ", spec) == "Título no puede estar vacío"
        assert validate_field("ab", spec) == "Título debe tener al menos 3 caracteres"
        assert validate_field("abc", spec) is None

    def test_zero_is_present(self):
        spec = FieldSpec(id="property_parking", label="Estacionamientos", type="number",
                         required=True, min=0, allow_decimals=False)
        assert validate_field(0, spec) is None

    def test_number_rules(self):
        spec = FieldSpec(id="property_bedrooms", label="Dormitorios", type="number",
                         required=True, min=0, allow_decimals=False)
        assert validate_field("x", spec) == "Dormitorios debe ser un número válido"
        assert validate_field(-1, spec) == "Dormitorios debe ser mayor o igual a 0"
        assert validate_field(2.5, spec) == "Dormitorios debe ser un número entero"

    def test_price(self):
        spec = FieldSpec(id="property_price", label="Precio", type="price", required=True)
        assert validate_field("000", spec) == "Precio debe ser un valor válido mayor a 0"
        assert validate_field("100", spec) is None


class TestPrefill:
    def test_from_publication(self):
        wizard = _wizard()
        assert wizard.values["title"] == "Casa amplia con jardín"
        assert wizard.values["property_price"] == "23000000"
        assert wizard.price_display == "230,000.00"
        assert wizard.values["latitude"] == "6.2442"
        assert len(wizard.time_slots) == 1
        assert wizard.existing_images == ["https://cdn.example.com/1/a.jpg", "https://cdn.example.com/1/b.jpg"]

    def test_fallback_title(self):
        pub = publication_from_dto(make_publication_dto(propertyTitle=None))
        wizard = PublicationWizard.from_publication(pub, fallback_title="Título guardado")
        assert wizard.values["title"] == "Título guardado"


class TestSteps:
    def test_blocked_until_valid(self):
        wizard = PublicationWizard()
        assert wizard.next_step() is False
        assert wizard.current_step == 0
        assert wizard.errors["title"] == "Título del Aviso es obligatorio"
        assert "property_bedrooms" in wizard.errors

    def test_walks_to_review(self):
        wizard = _wizard()
        while not wizard.is_review:
            assert wizard.next_step() is True
        assert wizard.next_step() is False
        assert wizard.previous_step() is True

    def test_set_value_clears_error_and_parses(self):
        wizard = _wizard()
        wizard.set_value("title", "")
        assert wizard.validate_step(0) is False
        wizard.set_value("title", "Casa renovada")
        assert "title" not in wizard.errors
        wizard.set_value("property_bedrooms", "4 habitaciones")
        assert wizard.values["property_bedrooms"] == 4
        wizard.set_value("property_price", "$1,500.00")
        assert wizard.values["property_price"] == "150000"

    def test_missing_location(self):
        wizard = _wizard(latitude=None, longitude=None)
        assert wizard.validate_step(1) is False
        assert wizard.errors["location_map"] == "Debe seleccionar una ubicación en el mapa"
        wizard.set_location(6.25, -75.56)
        assert wizard.validate_step(1) is True

    def test_validate_all_jumps_to_first_failure(self):
        wizard = _wizard(propertyPrice=0)
        wizard.current_step = 4
        assert wizard.validate_all() is False
        assert wizard.current_step == 2
        assert "property_price" in wizard.errors

    def test_submission_names_failing_step(self):
        wizard = _wizard(availableTimes=[])
        with pytest.raises(ValidationError) as exc:
            wizard.submission()
        assert exc.value.message == "Por favor complete correctamente el paso: Precio y Disponibilidad"
        assert "available_times" in exc.value.errors


class TestTimeSlots:
    def test_normalize(self):
        assert normalize_time("09:30") == "09:30:00"
        assert normalize_time("09:30:15") == "09:30:15"
        assert normalize_time("9:30") == "09:30:00"

    def test_single_digit_hour_compares_by_time(self):
        slot = _wizard().add_time_slot(1, "9:30", "10:00")
        assert (slot.start_time, slot.end_time) == ("09:30:00", "10:00:00")
        with pytest.raises(ValidationError):
            _wizard().add_time_slot(1, "10:00", "9:30")

    @pytest.mark.parametrize("value", ["25:00", "9h30", "mediodía"])
    def test_not_a_time(self, value):
        with pytest.raises(ValidationError):
            _wizard().add_time_slot(1, value, "18:00")

    def test_day_name_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _wizard().add_time_slot("lunes", "09:00", "10:00")
        assert exc.value.message == "Día de la semana inválido"

    def test_incomplete(self):
        with pytest.raises(ValidationError):
            _wizard().add_time_slot(2, "", "10:00")

    def test_unknown_day(self):
        with pytest.raises(ValidationError):
            _wizard().add_time_slot(8, "09:00", "10:00")

    def test_end_before_start(self):
        with pytest.raises(ValidationError) as exc:
            _wizard().add_time_slot(2, "10:00", "09:00")
        assert exc.value.message == "La hora de fin debe ser posterior a la hora de inicio"

    def test_change_tracking(self):
        wizard = _wizard()
        assert wizard.times_changed() is False
        slot = wizard.add_time_slot(3, "14:00", "16:00")
        assert slot.start_time == "14:00:00"
        assert wizard.times_changed() is True
        wizard.remove_time_slot(1)
        assert wizard.times_changed() is False


class TestFormFields:
    def test_unchanged_slots_not_sent(self):
        wizard = _wizard()
        fields = dict(wizard.submission().to_form_fields(wizard.times_changed()))
        assert fields["PropertyPrice"] == "230000.00"
        assert fields["propertyTitle"] == "Casa amplia con jardín"
        assert fields["propertyFurnished"] == "false"
        assert not any(key.startswith("availableTimes") for key in fields)

    def test_changed_slots_sent_indexed(self):
        wizard = _wizard()
        wizard.add_time_slot(5, "08:00", "09:00")
        fields = wizard.submission().to_form_fields(wizard.times_changed())
        assert ("availableTimes[0].id", "11") in fields
        assert ("availableTimes[1].dayOfWeek", "5") in fields
        assert ("availableTimes[1].startTime", "08:00:00") in fields

    def test_cleared_slots(self):
        wizard = _wizard()
        wizard.remove_time_slot(0)
        fields = wizard.build_form().to_form_fields(wizard.times_changed())
        assert ("availableTimes", "[]") in fields


class TestCanEdit:
    def test_owner(self):
        pub = publication_from_dto(make_publication_dto(userId=7))
        assert can_edit("7", pub) is True
        assert can_edit("8", pub) is False
        assert can_edit(None, pub) is False

    def test_unknown_owner(self):
        dto = make_publication_dto()
        del dto["userId"]
        assert can_edit("8", publication_from_dto(dto)) is True
