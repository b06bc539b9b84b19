"""Form model for the create/edit publication wizard and its multipart encoding."""
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel

from marketplace.schemas.publication_schema import AvailableTime
from marketplace.services.price_service import cents_digits_to_api

Number = Union[int, float, str]


class PublicationForm(BaseModel):
    title: str = ""
    tipo: str = ""
    property_description: str = ""
    property_size: Optional[Number] = ""
    property_bedrooms: Optional[Number] = ""
    property_floors: Optional[Number] = ""
    property_parking: Optional[Number] = ""
    property_furnished: bool = False
    property_address: str = ""
    neighborhood: str = ""
    municipality: str = ""
    department: str = ""
    latitude: str = ""
    longitude: str = ""
    property_price: str = ""              # cents digit string, e.g. "23000000"
    available_times: List[AvailableTime] = []

    def to_form_fields(self, available_times_changed: bool = True) -> List[Tuple[str, str]]:
        """Multipart fields for PUT /publications/{id}.

        Time slots are only sent when they changed (the backend re-creates the
        collection otherwise); a cleared list is sent as `availableTimes=[]`.
        """
        def text(value) -> str:
            return "" if value is None else str(value)

        fields = [
            ("propertyAddress", self.property_address or ""),
            ("propertyTitle", (self.title or "").strip()),
            ("typeName", self.tipo or ""),
            ("neighborhood", self.neighborhood or ""),
            ("municipality", self.municipality or ""),
            ("department", self.department or ""),
            ("longitude", text(self.longitude)),
            ("latitude", text(self.latitude)),
            ("propertySize", text(self.property_size)),
            ("propertyBedrooms", text(self.property_bedrooms)),
            ("propertyFloors", text(self.property_floors)),
            ("propertyParking", text(self.property_parking)),
            ("propertyFurnished", "true" if self.property_furnished else "false"),
            ("PropertyDescription", self.property_description or ""),
            ("PropertyPrice", cents_digits_to_api(self.property_price)),
        ]

        if available_times_changed and self.available_times:
            for index, slot in enumerate(self.available_times):
                prefix = f"availableTimes[{index}]"
                if slot.id is not None:
                    fields.append((f"{prefix}.id", str(slot.id)))
                fields.append((f"{prefix}.dayOfWeek", str(slot.day_of_week)))
                fields.append((f"{prefix}.startTime", slot.start_time or ""))
                fields.append((f"{prefix}.endTime", slot.end_time or ""))
        elif available_times_changed:
            fields.append(("availableTimes", "[]"))

        return fields
