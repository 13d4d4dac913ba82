"""Configuration validation utilities."""

import codecs
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_parser_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate parser parameters."""
        errors = []

        if "encoding" in params:
            value = params["encoding"]
            try:
                codecs.lookup(value)
            except (LookupError, TypeError):
                errors.append(ValidationError(
                    field="encoding",
                    message="Must be a known codec name",
                    value=value
                ))

        for name in ("heuristic_scan_lines", "min_cells_domestic", "min_cells_foreign"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_matching_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate matching parameters."""
        errors = []

        if "ceil_holding_days" in params:
            value = params["ceil_holding_days"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="ceil_holding_days",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_analysis_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate analysis parameters."""
        errors = []

        if "histogram_bucket_pct" in params:
            value = params["histogram_bucket_pct"]
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="histogram_bucket_pct",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_store_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate store parameters."""
        errors = []

        if "db_path" in params:
            value = params["db_path"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="db_path",
                    message="Must be a non-empty string",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @classmethod
    def validate_config(cls, config: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete merged configuration."""
        errors = []

        errors.extend(cls.validate_parser_params(config.get("parser", {})))
        errors.extend(cls.validate_matching_params(config.get("matching", {})))
        errors.extend(cls.validate_analysis_params(config.get("analysis", {})))
        errors.extend(cls.validate_store_params(config.get("store", {})))

        return errors
