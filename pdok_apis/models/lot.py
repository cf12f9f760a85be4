from typing import Any

from pydantic import BaseModel, ConfigDict


class Lot(BaseModel):
    """A cadastral parcel along with its geometry and size."""

    model_config = ConfigDict(frozen=True)

    id: str
    municipality_name: str | None = None
    municipality_code: str
    section_letter: str
    lot_number: str
    area: float | None = None
    geometry: dict[str, Any]
