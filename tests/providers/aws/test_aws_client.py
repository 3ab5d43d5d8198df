"""Tests for the AWS client wrapper."""

from unittest.mock import Mock

import pytest

from eni_lifecycle.config.settings import ReconcilerConfig
from eni_lifecycle.providers.aws.infrastructure.aws_client import AWSClient


@pytest.mark.unit
@pytest.mark.aws
class TestAWSClient:
    """Session and botocore configuration."""

    def setup_method(self):
        self.session = Mock()
        self.config = ReconcilerConfig(
            region="us-west-2", max_attempts=4, connect_timeout=3, read_timeout=20
        )

    def test_boto_config_carries_retries_and_timeouts(self):
        client = AWSClient(self.config, session=self.session)

        assert client.region_name == "us-west-2"
        assert client.boto_config.retries == {"max_attempts": 4, "mode": "adaptive"}
        assert client.boto_config.connect_timeout == 3
        assert client.boto_config.read_timeout == 20

    def test_ec2_client_is_created_once(self):
        client = AWSClient(self.config, session=self.session)

        first = client.ec2_client
        second = client.ec2_client

        assert first is second
        self.session.client.assert_called_once_with("ec2", config=client.boto_config)

    def test_endpoint_url_is_passed_through(self):
        config = ReconcilerConfig(endpoint_url="http://localhost:5000")
        client = AWSClient(config, session=self.session)

        client.ec2_client

        self.session.client.assert_called_once_with(
            "ec2", config=client.boto_config, endpoint_url="http://localhost:5000"
        )
