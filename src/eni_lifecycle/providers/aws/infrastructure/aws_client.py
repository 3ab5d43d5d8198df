"""AWS client wrapper holding the boto3 session and EC2 client."""

from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError

from eni_lifecycle.config.settings import ReconcilerConfig
from eni_lifecycle.domain.base.exceptions import ConfigurationError
from eni_lifecycle.infrastructure.logging.logger import get_logger


class AWSClient:
    """Wrapper for AWS service clients with retry and timeout configuration."""

    def __init__(self, config: ReconcilerConfig, session: Optional[Any] = None) -> None:
        """
        Initialize AWS client wrapper.

        Args:
            config: Reconciler configuration carrying region, profile and timeouts
            session: Pre-built boto3 session, mainly for tests
        """
        self._config = config
        self._logger = get_logger(__name__)
        self.region_name = config.region
        self.profile_name = config.profile

        # botocore retries cover throttling on a single request; the reconcilers
        # layer their own deadline-bounded retries on top.
        self.boto_config = Config(
            region_name=self.region_name,
            retries={"max_attempts": config.max_attempts, "mode": "adaptive"},
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
        )

        try:
            self.session = session or boto3.Session(
                region_name=self.region_name, profile_name=self.profile_name
            )
        except BotoCoreError as e:
            raise ConfigurationError(f"AWS session initialization failed: {e}") from e

        self._ec2_client = None

        self._logger.info(
            "AWS client initialized with region: %s, profile: %s, retries: %d, timeouts: connect=%ds, read=%ds",
            self.region_name,
            self.profile_name or "default",
            config.max_attempts,
            config.connect_timeout,
            config.read_timeout,
        )

    @property
    def ec2_client(self):
        """Lazy initialization of EC2 client."""
        if self._ec2_client is None:
            self._logger.debug("Initializing EC2 client on first use")
            kwargs: dict[str, Any] = {"config": self.boto_config}
            if self._config.endpoint_url:
                kwargs["endpoint_url"] = self._config.endpoint_url
            self._ec2_client = self.session.client("ec2", **kwargs)
        return self._ec2_client
