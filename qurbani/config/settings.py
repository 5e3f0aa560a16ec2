# qurbani/config/settings.py
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QURBANI_",
        env_file=".env",            # lee automáticamente el .env en la raíz
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(
        default="qurbani-share-service",
        description="Service name for FastAPI.",
    )

    # Colaborador de creación de registros (endpoint /api/customers)
    customers_service_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the service exposing /api/customers.",
    )
    request_timeout: float = Field(
        default=10.0,
        description="Timeout in seconds for each record-creation call.",
        gt=0,
    )

    # Tarifas por hissa, según región
    mumbai_rate: float = Field(
        default=0.0,
        description="Rate per hissa for Mumbai receipts.",
        ge=0,
    )
    out_of_mumbai_rate: float = Field(
        default=0.0,
        description="Rate per hissa for Out of Mumbai receipts.",
        ge=0,
    )
    currency: str = Field(
        default="INR",
        description="Currency code printed on receipts.",
    )
