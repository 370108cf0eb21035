from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ServiceLeg:
    """One scheduled directed connection for a given day-of-week.

    Departure and arrival are already rounded to a 5-minute grid by the
    provisioning job. A leg covers any pair of stops of the same service,
    not only consecutive ones.
    """

    from_station: str
    to_station: str
    departure: datetime
    arrival: datetime
    from_municipality: str
    to_municipality: str
    from_province: str
    to_province: str
    service_id: Optional[str] = None

    @property
    def travel_minutes(self) -> int:
        """Minutes between departure and arrival buckets."""
        return int((self.arrival - self.departure).total_seconds() // 60)
