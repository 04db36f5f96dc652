"""Lead capture form fields and submission validation."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any


class FieldType(Enum):
    """Form field types."""
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"


FIELD_TYPES = {t.value for t in FieldType}

MAX_VALUE_LENGTH = 5000

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
FIELD_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

TRUTHY = {"1", "true", "on", "yes", "sim"}


@dataclass
class FormField:
    """A single field of a system form."""
    id: str
    type: str
    label: str
    required: bool = False
    placeholder: str = ""
    options: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "placeholder": self.placeholder,
            "required": self.required,
        }
        if self.options:
            data["options"] = [dict(o) for o in self.options]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormField":
        if not isinstance(data, dict):
            raise ValueError("Form field must be an object")

        field_id = str(data.get("id") or "").strip()
        if not FIELD_ID_PATTERN.match(field_id):
            raise ValueError(f"Invalid form field id: {field_id!r}")

        field_type = data.get("type") or FieldType.TEXT.value
        if field_type not in FIELD_TYPES:
            raise ValueError(f"Unknown form field type: {field_type}")

        label = str(data.get("label") or "").strip()
        if not label:
            raise ValueError(f"Form field '{field_id}' needs a label")

        options = []
        for option in data.get("options") or []:
            if isinstance(option, dict):
                value = str(option.get("value", "")).strip()
                options.append({"label": str(option.get("label") or value), "value": value})
            else:
                options.append({"label": str(option), "value": str(option)})

        if field_type in (FieldType.SELECT.value, FieldType.RADIO.value) and not options:
            raise ValueError(f"Form field '{field_id}' needs at least one option")

        return cls(
            id=field_id,
            type=field_type,
            label=label,
            required=bool(data.get("required", False)),
            placeholder=str(data.get("placeholder") or ""),
            options=options,
        )

    @property
    def option_values(self) -> List[str]:
        return [o["value"] for o in self.options]


DEFAULT_FORM_FIELDS = [
    FormField("name", "text", "Nome", required=True, placeholder="Digite seu nome"),
    FormField("email", "email", "E-mail", required=True, placeholder="Digite seu e-mail"),
    FormField("phone", "tel", "Telefone", placeholder="(00) 00000-0000"),
    FormField("address", "text", "Endereço", placeholder="Digite seu endereço"),
    FormField("city", "text", "Cidade", placeholder="Digite sua cidade"),
    FormField("zipcode", "text", "CEP", placeholder="00000-000"),
]


def default_form_fields() -> List[Dict[str, Any]]:
    return [f.to_dict() for f in DEFAULT_FORM_FIELDS]


def normalize_form_fields(fields: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Validate a stored field list, rejecting duplicate ids."""
    if fields is None:
        return default_form_fields()
    if not isinstance(fields, list):
        raise ValueError("formFields must be a list")

    parsed = [FormField.from_dict(f) for f in fields]
    seen = set()
    for f in parsed:
        if f.id in seen:
            raise ValueError(f"Duplicate form field id: {f.id}")
        seen.add(f.id)
    return [f.to_dict() for f in parsed]


def _clean(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        value = ", ".join(str(v) for v in value)
    return str(value).strip()[:MAX_VALUE_LENGTH]


def validate_submission(fields: List[Dict[str, Any]], data: Dict[str, Any]) -> Dict[str, str]:
    """Check submitted values against a system form.

    Returns the cleaned data (known fields only, trimmed, length capped).
    Raises ValueError naming the first invalid field.
    """
    if not isinstance(data, dict):
        raise ValueError("Submission must be an object")

    cleaned: Dict[str, str] = {}
    for raw in fields:
        form_field = FormField.from_dict(raw)
        value = _clean(data.get(form_field.id))

        if form_field.type == FieldType.CHECKBOX.value and not form_field.options:
            value = "true" if value.lower() in TRUTHY else ""

        if not value:
            if form_field.required:
                raise ValueError(f"Field '{form_field.label}' is required")
            continue

        if form_field.type == FieldType.EMAIL.value and not EMAIL_PATTERN.match(value):
            raise ValueError(f"Field '{form_field.label}' must be a valid email")

        if form_field.type == FieldType.NUMBER.value:
            try:
                float(value.replace(",", "."))
            except ValueError:
                raise ValueError(f"Field '{form_field.label}' must be a number")

        if form_field.type == FieldType.DATE.value and not DATE_PATTERN.match(value):
            raise ValueError(f"Field '{form_field.label}' must be a date (YYYY-MM-DD)")

        if form_field.type in (FieldType.SELECT.value, FieldType.RADIO.value):
            if value not in form_field.option_values:
                raise ValueError(f"Field '{form_field.label}' has an invalid option")

        if form_field.type == FieldType.CHECKBOX.value and form_field.options:
            chosen = [v.strip() for v in value.split(",") if v.strip()]
            invalid = [v for v in chosen if v not in form_field.option_values]
            if invalid:
                raise ValueError(f"Field '{form_field.label}' has an invalid option")
            value = ", ".join(chosen)

        cleaned[form_field.id] = value

    return cleaned


def clean_custom_submission(data: Dict[str, Any], max_fields: int = 50) -> Dict[str, str]:
    """Accept arbitrary fields from a custom HTML form, trimmed and capped."""
    if not isinstance(data, dict):
        raise ValueError("Submission must be an object")

    cleaned: Dict[str, str] = {}
    for key, value in data.items():
        key = str(key).strip()[:64]
        if not key or key.startswith("_"):
            continue
        value = _clean(value)
        if value:
            cleaned[key] = value
        if len(cleaned) >= max_fields:
            break

    if not cleaned:
        raise ValueError("Submission is empty")
    return cleaned
