from typing import Any

from pydantic import BaseModel, ConfigDict


class Pand(BaseModel):
    """A BAG building, combined with the verblijfsobject it was looked up through."""

    model_config = ConfigDict(frozen=True)

    identificatiecode: str
    geometry: dict[str, Any]
    pandvlak: int | None = None
    vloeroppervlak: int | None = None
    bouwjaar: int | None = None
    pandstatus: str
    objectstatus: str | None = None
    gebruiksdoel: str = ""
