"""Validate and normalize contact-form payloads."""

import jsonschema

from contact_inbox.errors import ValidationError

REQUIRED_FIELDS = ("name", "email", "message")
OPTIONAL_FIELDS = ("phone", "service")

_SCALAR = {"type": ["string", "number", "null"]}

SUBMISSION_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        field: _SCALAR for field in REQUIRED_FIELDS + OPTIONAL_FIELDS
    },
}


class SubmissionValidator:
    """Checks payload shape against a JSON schema, then the required-field rule."""

    def __init__(self, schema=None):
        self._validator = jsonschema.Draft202012Validator(schema or SUBMISSION_SCHEMA)

    def validate(self, payload) -> dict:
        """Return the payload's contact fields, trimmed and coerced to text.

        Raises:
            ValidationError: if the payload is not an object, a field has a
                non-scalar value or text that cannot be encoded as UTF-8, or
                a required field is missing or blank.
        """
        errors = sorted(
            self._validator.iter_errors(payload),
            key=lambda e: list(e.path),
        )
        if errors:
            messages = [_describe(error) for error in errors]
            raise ValidationError("Invalid submission", errors=messages)

        fields = {
            field: _clean(payload.get(field))
            for field in REQUIRED_FIELDS + OPTIONAL_FIELDS
        }
        unencodable = [
            field for field, value in fields.items() if not _encodable(value)
        ]
        if unencodable:
            raise ValidationError(
                "Invalid submission",
                errors=[f"{field}: contains characters that are not valid text"
                        for field in unencodable],
            )

        missing = [field for field in REQUIRED_FIELDS if not fields[field]]
        if missing:
            raise ValidationError(
                "Missing required fields: " + ", ".join(missing),
                missing=missing,
            )
        return fields


def _clean(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _encodable(value: str) -> bool:
    # lone surrogates survive JSON decoding but cannot be written as UTF-8
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _describe(error: jsonschema.ValidationError) -> str:
    if error.path:
        return f"{'.'.join(str(p) for p in error.path)}: {error.message}"
    return error.message
