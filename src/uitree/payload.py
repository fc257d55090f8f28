"""App payload parser - JSON config to typed models."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError
from returns.result import Result, Success, Failure

from .core import get_logger, ValidationError
from .core.json import decode_json_object, JSONParseError
from .models import AppConfig

logger = get_logger(__name__)


def parse_app_config(content: str | bytes | dict[str, Any]) -> AppConfig:
    """
    Parse a server app payload into an AppConfig.

    Args:
        content: JSON text/bytes, or an already decoded dict

    Returns:
        Typed app configuration

    Raises:
        ValidationError: If the payload is not JSON or misses required sections
    """
    if isinstance(content, dict):
        payload = content
    else:
        try:
            payload = decode_json_object(content)
        except JSONParseError as e:
            logger.error("json_parse_failed", error=str(e))
            raise ValidationError(f"Invalid JSON: {e}") from e

    if "layout" not in payload:
        logger.error("missing_layout_section")
        raise ValidationError("Invalid app config: missing 'layout' section")

    try:
        config = AppConfig.model_validate(payload)
    except PydanticValidationError as e:
        logger.error("invalid_format", errors=e.error_count())
        raise ValidationError(f"Invalid app config: {e}") from e

    logger.debug(
        "parsed",
        components=len(config.components),
        dependencies=len(config.dependencies),
    )
    return config


def load_app_config(content: str | bytes | dict[str, Any]) -> Result[AppConfig, str]:
    """
    Parse app payload (Result pattern version).

    Args:
        content: JSON text/bytes or decoded dict

    Returns:
        Result holding the config or the error message
    """
    try:
        return Success(parse_app_config(content))
    except ValidationError as e:
        return Failure(str(e))


__all__ = ["parse_app_config", "load_app_config"]
