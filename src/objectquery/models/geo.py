"""
Geospatial Values.

`GeoPoint` and `GeoDistance` are the operands of the geo constraints
(`where_near`, `where_within_distance`, `where_within_geo_box`). Distances are
stored in radians, which is what the remote service expects for `$maxDistance`.
"""

from pydantic import BaseModel, ConfigDict, field_validator

EARTH_MEAN_RADIUS_KM = 6371.0
EARTH_MEAN_RADIUS_MILES = 3958.8


class GeoPoint(BaseModel):
    """
    A latitude/longitude pair.

    Attributes:
        latitude: Degrees in [-90, 90].
        longitude: Degrees in [-180, 180].
    """

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

    @field_validator("latitude")
    @classmethod
    def validate_latitude(cls, v: float) -> float:
        """Ensures latitude is within [-90, 90]."""
        if not (-90.0 <= v <= 90.0):
            raise ValueError(f"Latitude must be within the range [-90, 90]. Got {v}")
        return v

    @field_validator("longitude")
    @classmethod
    def validate_longitude(cls, v: float) -> float:
        """Ensures longitude is within [-180, 180]."""
        if not (-180.0 <= v <= 180.0):
            raise ValueError(
                f"Longitude must be within the range [-180, 180]. Got {v}"
            )
        return v


class GeoDistance(BaseModel):
    """An angular distance on the earth's surface, in radians."""

    model_config = ConfigDict(frozen=True)

    radians: float

    @classmethod
    def from_radians(cls, radians: float) -> "GeoDistance":
        return cls(radians=radians)

    @classmethod
    def from_kilometers(cls, kilometers: float) -> "GeoDistance":
        return cls(radians=kilometers / EARTH_MEAN_RADIUS_KM)

    @classmethod
    def from_miles(cls, miles: float) -> "GeoDistance":
        return cls(radians=miles / EARTH_MEAN_RADIUS_MILES)

    @property
    def kilometers(self) -> float:
        return self.radians * EARTH_MEAN_RADIUS_KM

    @property
    def miles(self) -> float:
        return self.radians * EARTH_MEAN_RADIUS_MILES
