"""Configuration management."""

import os
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key (scenario writing)"
    )
    replicate_api_token: str = Field(
        default_factory=lambda: os.getenv("REPLICATE_API_TOKEN", ""),
        description="Replicate API token (video providers)"
    )
    google_cloud_project: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_PROJECT", ""),
        description="Google Cloud project ID"
    )
    storage_bucket: str = Field(
        default_factory=lambda: os.getenv("STORYREEL_BUCKET", ""),
        description="GCS bucket for persisted clips and merged videos"
    )

    # Paths
    workspace: Path = Field(
        default_factory=lambda: Path(os.getenv("STORYREEL_WORKSPACE", ".")),
        description="Workspace directory"
    )

    # Model settings
    default_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Default Claude model"
    )

    # Generation settings
    max_parallel_jobs: int = Field(
        default=4,
        description="Maximum concurrent scene generations",
        ge=1,
    )
    poll_interval: float = Field(
        default=2.0,
        description="Seconds between provider status checks",
        gt=0,
    )
    max_poll_time: float = Field(
        default=600.0,
        description="Maximum seconds to wait for one scene",
        gt=0,
    )

    # Assembly settings
    merge_handle_ttl: float = Field(
        default=60.0,
        description="Seconds a merged video handle stays valid",
        gt=0,
    )

    class Config:
        """Pydantic config."""
        frozen = False

    def validate_required(self) -> None:
        """Validate that required credentials are set."""
        if not self.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")

    def validate_replicate_required(self) -> None:
        """Validate that the video provider token is set."""
        if not self.replicate_api_token:
            raise ValueError("REPLICATE_API_TOKEN not set")

    def validate_storage_required(self) -> None:
        """Validate that durable storage is configured.

        Raises:
            ValueError: If the bucket is missing or malformed.
        """
        if not self.storage_bucket:
            raise ValueError(
                "Missing required storage configuration: STORYREEL_BUCKET. "
                "Set the corresponding environment variable."
            )

        # Validate bucket format
        if not self.storage_bucket.startswith("gs://"):
            raise ValueError(
                f"STORYREEL_BUCKET must be a GCS URI starting with 'gs://'. "
                f"Got: {self.storage_bucket}"
            )


# Global config instance
config = Config()
