"""Validation utilities for catalogue identifiers and contact data."""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import phonenumbers

# Region assumed for phone numbers entered without a leading "+"
DEFAULT_PHONE_REGION = "IN"


@dataclass
class FieldError:
    """Validation error details."""
    field: str
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ISRCValidator:
    """Validator for International Standard Recording Code (ISRC)."""

    ISRC_PATTERN = re.compile(r"^[A-Z]{2}[A-Z0-9]{3}[0-9]{7}$")

    @classmethod
    def normalize(cls, isrc: str) -> str:
        """Uppercase and drop the display hyphens (IN-ABC-24-00001)."""
        return isrc.replace("-", "").replace(" ", "").upper()

    @classmethod
    def is_valid_format(cls, isrc: str) -> bool:
        if not isrc:
            return False
        return bool(cls.ISRC_PATTERN.match(cls.normalize(isrc)))

    @classmethod
    def validate(cls, isrc: Optional[str], field: str = "isrc") -> List[FieldError]:
        """Validate ISRC format."""
        errors = []

        if not isrc:
            return errors

        if not cls.is_valid_format(isrc):
            errors.append(FieldError(
                field=field,
                code="INVALID_ISRC_FORMAT",
                message="ISRC must be 2 letters + 3 alphanumeric + 7 digits",
                details={
                    "provided": isrc,
                    "expected_format": "CCXXXYYNNNNN (Country + Registrant + Year + ID)"
                }
            ))

        return errors

    @classmethod
    def parse_components(cls, isrc: str) -> Dict[str, str]:
        """Parse ISRC into its components."""
        if not cls.is_valid_format(isrc):
            raise ValueError("Invalid ISRC format")

        normalized = cls.normalize(isrc)
        return {
            "country_code": normalized[:2],
            "registrant_code": normalized[2:5],
            "year": normalized[5:7],
            "designation": normalized[7:]
        }


class UPCValidator:
    """Validator for UPC-A (12 digit) and EAN-13 barcodes."""

    UPC_PATTERN = re.compile(r"^[0-9]{12,13}$")

    @classmethod
    def check_digit(cls, body: str) -> int:
        """GTIN check digit: weights 3,1,3,... from the rightmost body digit."""
        total = 0
        for index, digit in enumerate(reversed(body)):
            total += int(digit) * (3 if index % 2 == 0 else 1)
        return (10 - total % 10) % 10

    @classmethod
    def validate(cls, upc: Optional[str]) -> List[FieldError]:
        errors = []

        if not upc:
            return errors

        if not cls.UPC_PATTERN.match(upc):
            errors.append(FieldError(
                field="upc",
                code="INVALID_UPC_FORMAT",
                message="UPC must be 12 digits (UPC-A) or 13 digits (EAN-13)",
                details={"provided": upc}
            ))
            return errors

        if cls.check_digit(upc[:-1]) != int(upc[-1]):
            errors.append(FieldError(
                field="upc",
                code="INVALID_UPC_CHECKSUM",
                message="UPC check digit does not match",
                details={"provided": upc}
            ))

        return errors


class PhoneValidator:
    """Validator for phone numbers."""

    @classmethod
    def validate(cls, phone: Optional[str], country_code: Optional[str] = DEFAULT_PHONE_REGION) -> List[FieldError]:
        """Validate phone number format."""
        errors = []

        if not phone:
            return errors

        try:
            parsed = phonenumbers.parse(phone, country_code)

            if not phonenumbers.is_valid_number(parsed):
                errors.append(FieldError(
                    field="phone",
                    code="INVALID_PHONE_NUMBER",
                    message="Invalid phone number format",
                    details={"provided": phone}
                ))

        except phonenumbers.NumberParseException as e:
            errors.append(FieldError(
                field="phone",
                code="PHONE_PARSE_ERROR",
                message=f"Failed to parse phone number: {e}",
                details={"provided": phone, "error": str(e)}
            ))

        return errors

    @classmethod
    def format_international(cls, phone: str, country_code: Optional[str] = DEFAULT_PHONE_REGION) -> Optional[str]:
        """Format phone number in E.164, or None when it cannot be parsed."""
        try:
            parsed = phonenumbers.parse(phone, country_code)
        except phonenumbers.NumberParseException:
            return None
        if not phonenumbers.is_valid_number(parsed):
            return None
        return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


class ReportMonthValidator:
    """Validator for YYYY-MM revenue reporting months."""

    MONTH_PATTERN = re.compile(r"^[0-9]{4}-(0[1-9]|1[0-2])$")

    @classmethod
    def validate(cls, month: Optional[str]) -> List[FieldError]:
        if not month or cls.MONTH_PATTERN.match(month):
            return []
        return [FieldError(
            field="reportMonth",
            code="INVALID_REPORT_MONTH",
            message="Report month must be in format YYYY-MM",
            details={"provided": month}
        )]


def first_error_message(errors: List[FieldError]) -> Optional[str]:
    return errors[0].message if errors else None
