"""City model for geocoding results."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class City(BaseModel):
    """City information returned by the geocoding API.

    ``population`` is ``None`` when the geocoder does not report one; a
    reported zero stays zero.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    country: str
    latitude: float
    longitude: float
    population: Optional[int] = None

    @property
    def identity(self) -> tuple[str, float, float]:
        """Return the (name, latitude, longitude) tuple identifying the city."""
        return (self.name, self.latitude, self.longitude)

    @property
    def identity_key(self) -> str:
        """Return the identity as a stable string for storage keys."""
        return f"{self.name}|{self.latitude!r}|{self.longitude!r}"

    def same_city(self, other: "City") -> bool:
        return self.identity == other.identity

    def population_label(self) -> Optional[str]:
        """Return a display label for the population, if one should be shown.

        Returns:
            A formatted string for known, positive populations, else None.
        """
        if not self.population:
            return None
        return f"Population: {self.population:,}"

    @classmethod
    def from_geocoding_result(cls, data: dict) -> "City":
        """Create a City from one geocoding API result.

        Args:
            data: A single entry of the geocoding ``results`` list.

        Returns:
            A populated City model.

        Raises:
            KeyError: If a required field is missing.
        """
        return cls(
            name=data["name"],
            country=data.get("country") or data.get("country_code") or "",
            latitude=data["latitude"],
            longitude=data["longitude"],
            population=data.get("population"),
        )
