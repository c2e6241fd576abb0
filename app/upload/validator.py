"""
Validation of uploaded files against per-field rules.

Rules are read from ``upload.files.<field>.<rule>`` falling back to
``upload.default.<rule>``. Missing rules never reject anything: an unset
allow-list means any value, a size bound of 0 means unbounded.
"""

from __future__ import annotations

from dataclasses import dataclass

from ferry_core.config import UploadConfig
from ferry_core.i18n import Translator
from ferry_core.runtime.errors import ValidationError

from .descriptor import FileDescriptor
from .names import is_safe_handle


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one file."""

    valid: bool
    message: str = ""
    rule: str | None = None

    def __bool__(self) -> bool:
        return self.valid


VALID = ValidationResult(valid=True)


class Validator:
    """
    Checks uploaded files against type, extension and size rules.

    Rules are applied in a fixed order (types, extensions, max-size,
    min-size) and the first failure wins.
    """

    def __init__(self, config: UploadConfig, translator: Translator):
        self.config = config
        self.translator = translator

    def _allow_list(self, field: str, rule: str) -> list[str] | None:
        key = f"upload.files.{field}.{rule}"
        if not self.config.has_key(key):
            key = f"upload.default.{rule}"
        return self.config.get_string_list(key)

    def _int_rule(self, field: str, rule: str) -> int:
        default = self.config.get_int(f"upload.default.{rule}", 0)
        return self.config.get_int(f"upload.files.{field}.{rule}", default)

    def _validate_property(self, field: str, value: str, rule: str, property_name: str) -> ValidationResult:
        allowed = self._allow_list(field, rule)
        if allowed is not None and value not in allowed:
            message = self.translator.trans(f"errors.upload.{property_name}", **{property_name: value})
            return ValidationResult(valid=False, message=message, rule=rule)
        return VALID

    def _validate_size(self, field: str, size: int, rule: str) -> ValidationResult:
        bound = self._int_rule(field, rule)
        if bound > 0 and (
            (rule == "max-size" and size > bound) or (rule == "min-size" and size < bound)
        ):
            message = self.translator.trans(f"errors.upload.{rule}", size=size)
            return ValidationResult(valid=False, message=message, rule=rule)
        return VALID

    def validate(self, field: str, descriptor: FileDescriptor) -> ValidationResult:
        """
        Validate an uploaded file.

        Args:
            field: The upload field name.
            descriptor: The file to check.

        Returns:
            ValidationResult: VALID, or the first failed rule with its
            localized message.
        """
        checks = (
            lambda: self._validate_property(field, descriptor.media_type, "types", "type"),
            lambda: self._validate_property(field, descriptor.extension, "extensions", "extension"),
            lambda: self._validate_size(field, descriptor.size, "max-size"),
            lambda: self._validate_size(field, descriptor.size, "min-size"),
        )
        for check in checks:
            result = check()
            if not result:
                return result
        return VALID

    def check(self, field: str, descriptor: FileDescriptor) -> None:
        """
        Raise ValidationError if the file breaks a rule.

        Raises:
            ValidationError: With the validator's localized message.
        """
        result = self.validate(field, descriptor)
        if not result:
            raise ValidationError(
                result.message,
                message_debug=f"Rule '{result.rule}' rejected {descriptor.filename} in field '{field}'",
            )

    def validate_temp_file_name(self, handle: str) -> bool:
        return is_safe_handle(handle)
