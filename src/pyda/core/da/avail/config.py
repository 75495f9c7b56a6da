from pydantic import BaseModel, Field, field_validator


class AvailConfig(BaseModel):
    """Configuration of the Avail DA backend.

    Parsed once from the JSON bytes given to init and never modified
    afterwards.
    """

    # Light client and node endpoints
    base_url: str = Field(
        default="http://localhost:7000/v1",
        description="Base URL of the Avail light client HTTP API"
    )
    api_url: str = Field(
        default="http://localhost:9933",
        description="URL of the Avail node RPC used for data submission"
    )

    # Submission identity
    seed: str = Field(
        default="",
        description="Seed the submission signing key is derived from"
    )
    app_id: int = Field(
        default=0,
        ge=0,
        description="Avail application ID blocks are submitted under"
    )

    # Availability threshold
    confidence: float = Field(
        default=92.5,
        description="Confidence (0-100) that must be exceeded for data to count as available"
    )

    # Transport and retrieval tuning
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for a single HTTP call"
    )
    retrieve_max_attempts: int = Field(
        default=10,
        description="Maximum app data reads while the block is still processing"
    )
    retrieve_backoff: float = Field(
        default=0.5,
        ge=0,
        description="Initial delay in seconds between processing retries"
    )
    retrieve_backoff_factor: float = Field(
        default=2.0,
        ge=1,
        description="Backoff multiplier for processing retry delays"
    )
    retrieve_max_backoff: float = Field(
        default=8.0,
        ge=0,
        description="Upper bound in seconds for a single retry delay"
    )

    @field_validator("confidence")
    def validate_confidence(cls, value):
        """Validate confidence threshold lies on the 0-100 scale."""
        if not 0 <= value <= 100:
            raise ValueError("Confidence threshold must be between 0 and 100")
        return value

    @field_validator("request_timeout")
    def validate_request_timeout(cls, value):
        """Validate request timeout is positive."""
        if value <= 0:
            raise ValueError("Request timeout must be greater than 0")
        return value

    @field_validator("retrieve_max_attempts")
    def validate_max_attempts(cls, value):
        """Validate at least one read is attempted."""
        if value < 1:
            raise ValueError("Retrieve max attempts must be at least 1")
        return value

    model_config = {
        "frozen": True,
    }
