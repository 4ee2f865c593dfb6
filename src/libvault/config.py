"""
Configuration classes for libvault.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class HTTPOptions(BaseModel):
    """Options understood by the bundled httpx transport."""
    model_config = ConfigDict(extra="forbid")

    timeout: float = Field(30.0, description="Request timeout in seconds")
    max_connections: int = Field(10, description="Maximum number of connections")
    verify_ssl: bool = Field(True, description="Whether to verify SSL certificates")
    ca_bundle: Optional[str] = Field(None, description="Path to CA bundle file")
    follow_redirects: bool = Field(True, description="Whether to follow redirects")

    # Retry configuration
    max_retries: int = Field(0, ge=0, description="Retries after a failed connection attempt")
    retry_backoff_factor: float = Field(1.0, description="Exponential backoff multiplier")
    retry_max_wait: float = Field(10.0, description="Maximum wait between retries in seconds")

    # Logging configuration
    log_requests: bool = Field(False, description="Whether to log HTTP requests")
    log_responses: bool = Field(False, description="Whether to log HTTP responses")

    @property
    def verify(self):
        """Value for httpx's ``verify`` argument."""
        if self.verify_ssl and self.ca_bundle:
            return self.ca_bundle
        return self.verify_ssl
