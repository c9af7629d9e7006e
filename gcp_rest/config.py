"""
Configuration management for the REST clients.
"""

import os
from typing import Optional


class Config:
    """Configuration class for client settings."""

    # Google Cloud Project Configuration
    GCP_PROJECT_ID: str = os.getenv(
        "GCP_PROJECT_ID",
        os.getenv("GOOGLE_CLOUD_PROJECT", os.getenv("GCP_PROJECT", "")),
    )
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = os.getenv(
        "GOOGLE_APPLICATION_CREDENTIALS"
    )

    # Emulators (local development)
    PUBSUB_EMULATOR_HOST: Optional[str] = os.getenv("PUBSUB_EMULATOR_HOST")
    STORAGE_EMULATOR_HOST: Optional[str] = os.getenv("STORAGE_EMULATOR_HOST")

    # API roots
    PUBSUB_API_ROOT: str = os.getenv(
        "PUBSUB_API_ROOT", "https://pubsub.googleapis.com/v1"
    )
    STORAGE_API_ROOT: str = os.getenv(
        "STORAGE_API_ROOT", "https://storage.googleapis.com/storage/v1"
    )

    # Pull/Ack defaults
    PUBSUB_ACK_DEADLINE_SECONDS: int = int(
        os.getenv("PUBSUB_ACK_DEADLINE_SECONDS", "10")
    )
    PUBSUB_MAX_MESSAGES: int = int(os.getenv("PUBSUB_MAX_MESSAGES", "100"))

    # Request timeout in seconds (empty means no timeout)
    REQUEST_TIMEOUT: str = os.getenv("REQUEST_TIMEOUT", "")

    # Service Configuration
    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "gcp_rest")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # OAuth scopes requested for Application Default Credentials
    AUTH_SCOPES = (
        "https://www.googleapis.com/auth/pubsub",
        "https://www.googleapis.com/auth/devstorage.read_write",
    )

    @classmethod
    def get_pubsub_root(cls) -> str:
        """Get the Pub/Sub REST root.

        Supports two modes:
        1. Emulator: PUBSUB_EMULATOR_HOST is set, plain HTTP to the emulator
        2. Production: PUBSUB_API_ROOT (defaults to pubsub.googleapis.com)
        """
        if cls.PUBSUB_EMULATOR_HOST:
            return f"http://{cls.PUBSUB_EMULATOR_HOST}/v1"
        return cls.PUBSUB_API_ROOT.rstrip("/")

    @classmethod
    def get_storage_root(cls) -> str:
        """Get the Cloud Storage JSON API root.

        STORAGE_EMULATOR_HOST already carries its scheme (e.g. http://localhost:4443),
        matching what google-cloud-storage expects.
        """
        if cls.STORAGE_EMULATOR_HOST:
            host = cls.STORAGE_EMULATOR_HOST.rstrip("/")
            if "://" not in host:
                host = f"http://{host}"
            return f"{host}/storage/v1"
        return cls.STORAGE_API_ROOT.rstrip("/")

    @classmethod
    def get_request_timeout(cls) -> Optional[float]:
        """Get the default request timeout in seconds, or None for no timeout."""
        if not cls.REQUEST_TIMEOUT:
            return None
        timeout = float(cls.REQUEST_TIMEOUT)
        return timeout if timeout > 0 else None

    @classmethod
    def is_emulator(cls) -> bool:
        """Whether any emulator endpoint is configured."""
        return bool(cls.PUBSUB_EMULATOR_HOST or cls.STORAGE_EMULATOR_HOST)
