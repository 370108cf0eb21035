from dataclasses import dataclass


@dataclass(frozen=True)
class Station:
    """Train station reference record.

    Municipality and province are opaque surrogate keys from the
    reference file (e.g. "GM0363", "PV27").
    """

    code: str
    name: str
    latitude: float
    longitude: float
    municipality_id: str
    province_id: str
    monument_count: int = 0

    @classmethod
    def from_csv_row(cls, row: dict) -> "Station":
        """Create Station from an already validated reference CSV row."""
        return cls(
            code=row["station_code"],
            name=row["station_name"],
            latitude=float(row["lat"]),
            longitude=float(row["lon"]),
            municipality_id=row["municipality_sk"],
            province_id=row["province_sk"],
            monument_count=int(row.get("number_of_monuments") or 0),
        )
