"""Tests for system form fields and submission validation."""

import pytest

from simplo_pages.landing_pages import (
    FormField,
    DEFAULT_FORM_FIELDS,
    default_form_fields,
    validate_submission,
    clean_custom_submission,
)
from simplo_pages.landing_pages.forms import normalize_form_fields, MAX_VALUE_LENGTH


class TestFormField:
    def test_defaults_require_name_and_email(self):
        ids = [f.id for f in DEFAULT_FORM_FIELDS]
        assert ids == ["name", "email", "phone", "address", "city", "zipcode"]
        required = {f.id for f in DEFAULT_FORM_FIELDS if f.required}
        assert required == {"name", "email"}

    def test_from_dict_normalizes_string_options(self):
        field = FormField.from_dict({
            "id": "interest", "type": "select", "label": "Interesse",
            "options": ["Compra", {"label": "Aluguel", "value": "rent"}],
        })
        assert field.option_values == ["Compra", "rent"]
        assert field.options[0] == {"label": "Compra", "value": "Compra"}

    def test_select_needs_options(self):
        with pytest.raises(ValueError, match="option"):
            FormField.from_dict({"id": "x", "type": "select", "label": "X"})

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError, match="Unknown"):
            FormField.from_dict({"id": "x", "type": "color", "label": "X"})

    def test_invalid_id_rejected(self):
        with pytest.raises(ValueError):
            FormField.from_dict({"id": "bad id!", "type": "text", "label": "X"})

    def test_label_required(self):
        with pytest.raises(ValueError, match="label"):
            FormField.from_dict({"id": "x", "type": "text", "label": "  "})

    def test_normalize_none_gives_defaults(self):
        assert normalize_form_fields(None) == default_form_fields()

    def test_normalize_rejects_duplicate_ids(self):
        fields = [
            {"id": "name", "type": "text", "label": "Nome"},
            {"id": "name", "type": "text", "label": "Outro"},
        ]
        with pytest.raises(ValueError, match="Duplicate"):
            normalize_form_fields(fields)


class TestValidateSubmission:
    def setup_method(self):
        self.fields = default_form_fields() + [
            {"id": "age", "type": "number", "label": "Idade"},
            {"id": "birthday", "type": "date", "label": "Nascimento"},
            {"id": "plan", "type": "radio", "label": "Plano",
             "options": [{"label": "Básico", "value": "basic"}, {"label": "Pro", "value": "pro"}]},
            {"id": "topics", "type": "checkbox", "label": "Assuntos",
             "options": ["vendas", "marketing"]},
            {"id": "terms", "type": "checkbox", "label": "Aceito os termos"},
        ]

    def test_valid_submission_is_trimmed(self):
        cleaned = validate_submission(self.fields, {
            "name": "  Maria  ",
            "email": "maria@example.com",
            "age": "42,5",
            "plan": "pro",
        })
        assert cleaned == {"name": "Maria", "email": "maria@example.com", "age": "42,5", "plan": "pro"}

    def test_unknown_keys_are_dropped(self):
        cleaned = validate_submission(self.fields, {
            "name": "Maria", "email": "maria@example.com", "is_admin": "true",
        })
        assert "is_admin" not in cleaned

    def test_missing_required_field(self):
        with pytest.raises(ValueError, match="Nome"):
            validate_submission(self.fields, {"email": "maria@example.com"})

    def test_invalid_email(self):
        with pytest.raises(ValueError, match="valid email"):
            validate_submission(self.fields, {"name": "Maria", "email": "maria@"})

    def test_invalid_number(self):
        with pytest.raises(ValueError, match="number"):
            validate_submission(self.fields, {"name": "M", "email": "m@x.com", "age": "abc"})

    def test_invalid_date(self):
        with pytest.raises(ValueError, match="date"):
            validate_submission(self.fields, {"name": "M", "email": "m@x.com", "birthday": "01/02/2000"})

    def test_radio_option_must_exist(self):
        with pytest.raises(ValueError, match="invalid option"):
            validate_submission(self.fields, {"name": "M", "email": "m@x.com", "plan": "enterprise"})

    def test_multi_checkbox_accepts_lists(self):
        cleaned = validate_submission(self.fields, {
            "name": "M", "email": "m@x.com", "topics": ["vendas", "marketing"],
        })
        assert cleaned["topics"] == "vendas, marketing"

    def test_multi_checkbox_rejects_unknown_option(self):
        with pytest.raises(ValueError):
            validate_submission(self.fields, {"name": "M", "email": "m@x.com", "topics": ["pesca"]})

    def test_single_checkbox_becomes_true(self):
        cleaned = validate_submission(self.fields, {"name": "M", "email": "m@x.com", "terms": "on"})
        assert cleaned["terms"] == "true"

    def test_single_checkbox_unchecked_is_omitted(self):
        cleaned = validate_submission(self.fields, {"name": "M", "email": "m@x.com", "terms": "off"})
        assert "terms" not in cleaned

    def test_values_are_capped(self):
        cleaned = validate_submission(self.fields, {
            "name": "M" * (MAX_VALUE_LENGTH + 100), "email": "m@x.com",
        })
        assert len(cleaned["name"]) == MAX_VALUE_LENGTH

    def test_submission_must_be_object(self):
        with pytest.raises(ValueError):
            validate_submission(self.fields, ["name"])


class TestCustomSubmission:
    def test_keeps_arbitrary_fields(self):
        cleaned = clean_custom_submission({"nome": " Ana ", "empresa": "ACME"})
        assert cleaned == {"nome": "Ana", "empresa": "ACME"}

    def test_skips_private_and_empty_values(self):
        cleaned = clean_custom_submission({"_csrf": "x", "email": "a@b.com", "note": "  "})
        assert cleaned == {"email": "a@b.com"}

    def test_empty_submission_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            clean_custom_submission({"_token": "abc"})

    def test_field_count_is_capped(self):
        data = {f"f{i}": "x" for i in range(80)}
        assert len(clean_custom_submission(data, max_fields=50)) == 50
