"""Reconciler configuration schema and loader."""

from typing import Any, Literal, Optional, Union

import pydantic
from dynaconf import Dynaconf
from pydantic import BaseModel, ConfigDict, Field

from eni_lifecycle.domain.base.exceptions import ConfigurationError

DEFAULT_SETTINGS_FILES = ["eni_config.json"]


class ReconcilerConfig(BaseModel):
    """Provider connection, polling deadlines and logging settings."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    # AWS connection
    region: str = Field("eu-west-1", description="AWS region of the EC2 endpoint")
    profile: Optional[str] = Field(None, description="Named AWS profile to use")
    endpoint_url: Optional[str] = Field(None, description="Override EC2 endpoint URL")
    max_attempts: int = Field(3, ge=1, description="botocore retry attempts per request")
    connect_timeout: int = Field(5, ge=1, description="Connect timeout in seconds")
    read_timeout: int = Field(10, ge=1, description="Read timeout in seconds")

    # Polling
    poll_interval: float = Field(5.0, gt=0, description="Fixed delay between checks in seconds")
    create_timeout: float = Field(500.0, gt=0, description="Deadline for create to reach Available")
    attach_timeout: float = Field(60.0, gt=0, description="Deadline for attach to become visible")
    delete_timeout: float = Field(300.0, gt=0, description="Deadline for delete retries and absence")
    detach_timeout: float = Field(300.0, gt=0, description="Deadline for detach retries and absence")

    # Listing
    page_size: int = Field(50, ge=5, le=1000, description="Entries requested per listing page")

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    log_destination: Literal["stdout", "file", "both"] = Field(
        "stdout", description="Where log records are written"
    )
    log_dir: Optional[str] = Field(None, description="Directory for the log file")
    log_filename: str = Field("eni_lifecycle.log", description="Log file name")


def load_config(
    settings_files: Optional[Union[str, list[str]]] = None, **overrides: Any
) -> ReconcilerConfig:
    """
    Load configuration from settings files and ``ENI_`` environment variables.

    Args:
        settings_files: Settings file path(s); defaults to ``eni_config.json``
        **overrides: Explicit values that win over files and environment

    Returns:
        ReconcilerConfig: Validated configuration

    Raises:
        ConfigurationError: If the merged settings fail validation
    """
    if isinstance(settings_files, str):
        settings_files = [settings_files]

    settings = Dynaconf(
        envvar_prefix="ENI",
        settings_files=settings_files or DEFAULT_SETTINGS_FILES,
        environments=True,
        env_switcher="ENI_ENV",
        load_dotenv=True,
    )

    known_fields = set(ReconcilerConfig.model_fields)
    values = {
        key.lower(): value
        for key, value in settings.as_dict().items()
        if key.lower() in known_fields
    }
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ReconcilerConfig.model_validate(values)
    except pydantic.ValidationError as e:
        raise ConfigurationError(
            f"Invalid reconciler configuration: {e}",
            details={"errors": e.errors(include_url=False)},
        ) from e
