"""Configuration models."""

from pydantic import BaseModel, Field, model_validator


class AuthConfig(BaseModel):
    """Authentication configuration."""

    type: str = Field(..., pattern="^(password|session)$")
    user: str
    password: str | None = None
    session_id: str | None = None

    @model_validator(mode="after")
    def validate_secret_fields(self) -> "AuthConfig":
        """Validate the secret matching the auth type is present.

        Returns:
            Validated config

        Raises:
            ValueError: If the secret for the auth type is missing
        """
        required = "password" if self.type == "password" else "session_id"
        if getattr(self, required) is None:
            raise ValueError(f"{required} required when auth type is '{self.type}'")
        return self


class ProfileConfig(BaseModel):
    """Profile configuration for a vCenter or ESXi endpoint."""

    host: str
    port: int = 443
    verify_ssl: bool = True
    auth: AuthConfig
    timeout: int = 30
    api_release: str = Field("8.0.2.0", description="VI/JSON release in the /sdk/vim25 path")
    task_timeout: int = 600
    poll_interval: float = 2.0


class OutputConfig(BaseModel):
    """Output preferences."""

    format: str = Field(default="table", pattern="^(table|json|yaml)$")
    confirm_create: bool = True
