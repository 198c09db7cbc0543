"""Configuration module for the request pipeline.

This module provides the PipelineConfig class: the transport base url and
deadline, the business-envelope conventions of the backend, and the
navigation targets used for login and offline recovery.

Example:
    Basic usage with defaults:

        >>> config = PipelineConfig()
        >>> config.timeout_seconds
        30
        >>> config.session_expired_code
        401

    Custom configuration:

        >>> config = PipelineConfig(
        ...     base_url="https://api.example.com",
        ...     timeout_seconds=10,
        ...     login_path="/auth/login",
        ... )

    Loading from environment:

        >>> import os
        >>> os.environ['REQUEST_PIPELINE_BASE_URL'] = 'https://api.example.com'
        >>> os.environ['REQUEST_PIPELINE_TIMEOUT_SECONDS'] = '10'
        >>> config = PipelineConfig.from_env()
"""

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

from request_pipeline.models import ResultCode


class PipelineConfig(BaseModel):
    """Configuration for the request pipeline.

    Attributes:
        base_url: Base url every request path is resolved against.
        timeout_seconds: Transport deadline for each request. Must be between
            1 and 300. Default is 30 seconds.
        success_code: Business code meaning success. Default is 200.
        session_expired_code: Business code meaning the session expired.
            Default is 401.
        code_field: Response-body field holding the business code.
        message_field: Response-body field holding the business message.
        token_header: Header the auth token is sent in.
        login_path: Where to navigate when the session expires.
        offline_path: Where to navigate when a request fails while offline.

    Note:
        This class is immutable (frozen=True). Create a new instance if you
        need different settings.
    """

    base_url: str = Field(default="", description="Base url for all requests")
    timeout_seconds: int = Field(
        default=30,
        description="Transport deadline in seconds (1-300)",
    )
    success_code: int = Field(default=ResultCode.SUCCESS, description="Business success code")
    session_expired_code: int = Field(
        default=ResultCode.OVERDUE,
        description="Business code signalling an expired session",
    )
    code_field: str = Field(default="code", description="Body field with the business code")
    message_field: str = Field(default="msg", description="Body field with the business message")
    token_header: str = Field(default="x-access-token", description="Auth token header name")
    login_path: str = Field(default="/login", description="Login route")
    offline_path: str = Field(default="/500", description="Offline/error route")

    model_config = {"frozen": True}

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout_seconds(cls, v: int) -> int:
        """Validate the transport deadline is within acceptable range.

        Raises:
            ValueError: If timeout is not between 1 and 300.
        """
        if not (1 <= v <= 300):
            raise ValueError(f"timeout_seconds must be between 1 and 300, got {v}")
        return v

    @field_validator("login_path", "offline_path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Navigation targets are absolute application routes."""
        if not v.startswith("/"):
            raise ValueError(f"navigation paths must start with '/', got {v!r}")
        return v

    @field_validator("code_field", "message_field", "token_header")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("field names must not be empty")
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) url, got {v!r}")
        return v

    @classmethod
    def from_env(cls, prefix: str = "REQUEST_PIPELINE_") -> "PipelineConfig":
        """Create configuration from environment variables.

        Variable names are the upper-cased field names with the prefix.
        Missing variables fall back to the defaults.

        Args:
            prefix: Prefix for environment variable names.

        Returns:
            PipelineConfig populated from the environment.
        """
        config_dict: dict[str, Any] = {}

        field_types = {
            "base_url": str,
            "timeout_seconds": int,
            "success_code": int,
            "session_expired_code": int,
            "code_field": str,
            "message_field": str,
            "token_header": str,
            "login_path": str,
            "offline_path": str,
        }

        for field_name, field_type in field_types.items():
            env_value = os.environ.get(f"{prefix}{field_name.upper()}")
            if env_value is not None:
                config_dict[field_name] = int(env_value) if field_type is int else env_value

        return cls(**config_dict)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "PipelineConfig":
        """Create configuration from a dictionary.

        Raises:
            ValidationError: If the dictionary contains invalid values.
        """
        return cls(**config_dict)
