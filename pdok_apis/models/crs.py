from enum import Enum


class CoordinateSpace(str, Enum):
    """Coordinate reference system the upstream is asked to answer in."""

    gps = "epsg:4326"
    rijksdriehoek = "epsg:28992"

    @property
    def accept_crs(self) -> str:
        """Value for the ``Accept-Crs`` request header."""
        return self.value

    @property
    def srs_name(self) -> str:
        """Value for the WFS ``srsName`` parameter."""
        return self.value.upper()
