# planeta_agua/core/config.py
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator


class ConfigurationError(Exception):
    """Raised when the process environment cannot produce valid settings."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class Settings(BaseModel):
    # --- API Info ---
    API_TITLE: str = "Planeta Água API"
    API_DESCRIPTION: str = "Storefront backend: accounts, catalog, addresses, cards, orders and payments."
    API_VERSION: str = "1.0.0"

    # --- Server Configuration ---
    HOST: str = "0.0.0.0"
    PORT: int = 3333
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])
    LOG_CONFIG: str = "logging.conf"

    # --- Authentication ---
    JWT_SECRET: str = Field(..., min_length=1)
    JWT_ALGORITHM: str = "HS256"
    TOKEN_EXPIRE_DAYS: int = 7

    # --- Record Store ---
    STORE_BACKEND: str = "supabase"  # supabase | sql
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None
    DATABASE_URL: str = "sqlite:///./planeta_agua.db"

    # --- Mercado Pago ---
    MERCADO_PAGO_ACCESS_TOKEN: str = Field(..., min_length=1)
    GATEWAY_TIMEOUT_SECONDS: float = 5.0

    # --- Redirect / webhook construction ---
    FRONTEND_URL: str = "http://localhost:5173"
    API_URL: str = "http://localhost:3333"

    @model_validator(mode="after")
    def check_store_backend(self):
        if self.STORE_BACKEND not in ("supabase", "sql"):
            raise ValueError(f"STORE_BACKEND must be 'supabase' or 'sql', got '{self.STORE_BACKEND}'")
        if self.STORE_BACKEND == "supabase" and not (self.SUPABASE_URL and self.SUPABASE_KEY):
            raise ValueError("SUPABASE_URL and SUPABASE_KEY are required when STORE_BACKEND is 'supabase'")
        return self

    @classmethod
    def from_env(cls, env: Optional[dict] = None) -> "Settings":
        """Build settings from the process environment (after loading .env)."""
        if env is None:
            load_dotenv()
            env = dict(os.environ)

        values = {name: env[name] for name in cls.model_fields if env.get(name) not in (None, "")}
        if "CORS_ORIGINS" in values:
            values["CORS_ORIGINS"] = [o.strip() for o in values["CORS_ORIGINS"].split(",") if o.strip()]

        try:
            return cls(**values)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc']) or 'settings'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration: {problems}") from e
