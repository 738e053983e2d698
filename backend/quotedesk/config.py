from functools import lru_cache

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Amadeus
    amadeus_client_id: str = Field(..., alias="AMADEUS_API_KEY")
    amadeus_client_secret: str = Field(..., alias="AMADEUS_API_KEY_SECRET")
    amadeus_base_url: str = "https://test.api.amadeus.com"
    amadeus_timeout: float = 30.0

    # Flight search
    display_fee: float = 68.60  # added to displayed prices quoted in display_fee_currency
    display_fee_currency: str = "EUR"
    flight_default_results: int = 10
    flight_max_results: int = 50

    # SMTP
    smtp_host: str = Field(..., alias="SMTP_HOST")
    smtp_port: int = 587
    smtp_user: str = Field(..., alias="SMTP_USER")
    smtp_password: str = Field(..., alias="SMTP_PASSWORD")
    smtp_use_ssl: bool = False
    smtp_timeout: float = 30.0
    mail_from: str = ""

    # Recipients
    team_emails: str = Field(..., alias="TEAM_EMAILS")

    # Agency details printed in email footers
    agency_name: str = "Revolution Travel Services"
    agency_country: str = "Cameroun"
    agency_phone: str = "+237 677 916 832"
    agency_email: str = "p.revolutiontravel@yahoo.com"
    agency_hours: str = "8h/7 (8h par jour, pas le dimanche sauf urgence)"

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"

    # CORS
    cors_origins: str = "http://localhost:3000"

    @field_validator(
        "amadeus_client_id", "amadeus_client_secret", "smtp_host", "smtp_user", "smtp_password"
    )
    @classmethod
    def _non_empty(cls, v: str, info: ValidationInfo) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} must be a non-empty string")
        return v.strip()

    @field_validator("team_emails")
    @classmethod
    def _has_recipient(cls, v: str) -> str:
        if not any(e.strip() for e in v.split(",")):
            raise ValueError("TEAM_EMAILS must list at least one address")
        return v

    @field_validator("display_fee")
    @classmethod
    def _fee_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("DISPLAY_FEE must not be negative")
        return v

    @field_validator("flight_default_results", "flight_max_results")
    @classmethod
    def _results_in_range(cls, v: int) -> int:
        # Amadeus accepts at most 250 offers per call
        if not 1 <= v <= 250:
            raise ValueError("result limits must be between 1 and 250")
        return v

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def team_email_list(self) -> list[str]:
        return [e.strip() for e in self.team_emails.split(",") if e.strip()]

    @property
    def sender_address(self) -> str:
        return self.mail_from or self.smtp_user

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }


@lru_cache()
def get_settings() -> Settings:
    """Return application settings loaded from the environment."""
    return Settings()  # type: ignore[call-arg]
