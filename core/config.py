import logging
import secrets

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class PlannerSettings(BaseSettings):
    TRIP_PLANNING_TIMEOUT_MS: int = 15000
    MAX_LEGS: int = 8
    # "lineage" or "frontier", see src.trip_bc.routing.path_expander
    TERMINATION_SCOPE: str = "lineage"
    EXPANSION_WORKERS: int = 1

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class DataSettings(BaseSettings):
    DATA_DIR: str = "./data"
    STATIONS_FILE: str = "train_stations.csv"
    SERVICES_DIR: str = "train_services.parquet"
    MAX_STATIONS_FILE_BYTES: int = 1_000_000

    # Netherlands bounding box
    LAT_MIN: float = 50.0
    LAT_MAX: float = 54.0
    LON_MIN: float = 3.0
    LON_MAX: float = 8.0

    SERVICES_URL_TEMPLATE: str = "https://opendata.rijdendetreinen.nl/public/services/services-{month}.csv.gz"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def stations_path(self) -> str:
        return f"{self.DATA_DIR.rstrip('/')}/{self.STATIONS_FILE}"

    @property
    def services_path(self) -> str:
        return f"{self.DATA_DIR.rstrip('/')}/{self.SERVICES_DIR}"


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Admin token for /admin endpoints
    ADMIN_TOKEN: str = ""

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    # Planner settings (nested)
    planner: PlannerSettings = PlannerSettings()

    # Dataset locations (nested)
    data: DataSettings = DataSettings()

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def validate_production_settings(self) -> None:
        """Validate critical settings for production environment.

        Raises ValueError if production settings are invalid.
        """
        errors = []

        if self.is_production:
            if not self.ADMIN_TOKEN or len(self.ADMIN_TOKEN) < 32:
                errors.append(
                    "ADMIN_TOKEN must be set to a secure value (min 32 chars) in production"
                )

            if self.DEBUG:
                errors.append("DEBUG must be False in production")

        if self.planner.TRIP_PLANNING_TIMEOUT_MS <= 0:
            errors.append("TRIP_PLANNING_TIMEOUT_MS must be positive")

        if self.planner.MAX_LEGS < 1:
            errors.append("MAX_LEGS must be at least 1")

        if self.planner.TERMINATION_SCOPE not in ("lineage", "frontier"):
            errors.append("TERMINATION_SCOPE must be 'lineage' or 'frontier'")

        if errors:
            raise ValueError(
                "Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )

    def validate_development_settings(self) -> None:
        """Set sensible defaults for development if not configured."""
        if not self.ADMIN_TOKEN:
            self.ADMIN_TOKEN = secrets.token_urlsafe(32)
            logger.warning(f"Using auto-generated ADMIN_TOKEN for development: {self.ADMIN_TOKEN}")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Create settings instance
settings = Settings()

# Validate based on environment
settings.validate_production_settings()
if not settings.is_production:
    settings.validate_development_settings()
