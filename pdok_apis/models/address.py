from pydantic import BaseModel, ConfigDict, Field


class AddressSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    type: str
    score: float


class ResolvedAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    gekoppeld_perceel: tuple[str, ...] = Field(default_factory=tuple)
    nummeraanduiding_id: str | None = None
    adresseerbaar_object_id: str | None = None
    display_name: str
    street: str | None = None
    house_number: str | None = None
    house_letter: str | None = None
    addition: str | None = None
    postcode: str | None = None
    city: str | None = None
    municipality: str | None = None
    province: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    rd_x: float | None = None
    rd_y: float | None = None
