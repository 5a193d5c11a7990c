"""Tests for placeholder extraction and substitution"""

import pytest

from leasedocs.errors import ValidationError
from leasedocs.services.variables import extract_variables, fill_variables


class TestExtractVariables:
    def test_distinct_in_first_seen_order(self):
        body = "Hi {{NAME}}, rent is {{CURRENCY}}{{AMOUNT}}. Thanks {{NAME}}."
        assert extract_variables(body) == ["NAME", "CURRENCY", "AMOUNT"]

    def test_empty_body(self):
        assert extract_variables("") == []
        assert extract_variables(None) == []

    def test_only_upper_snake_tokens(self):
        body = "{{name}} {{Tenant}} {{UNIT_2}} { {NAME} } {{ NAME }} {{}} {{OK_NAME}}"
        assert extract_variables(body) == ["OK_NAME"]

    def test_adjacent_tokens(self):
        assert extract_variables("{{A}}{{B}}{{A}}") == ["A", "B"]


class TestFillVariables:
    def test_replaces_every_occurrence(self):
        body = "{{NAME}} owes {{AMOUNT}}. Dear {{NAME}}"
        assert fill_variables(body, {"NAME": "Ada", "AMOUNT": 500}) == "Ada owes 500. Dear Ada"

    def test_missing_values_stay_verbatim(self):
        assert fill_variables("Hi {{NAME}} at {{UNIT}}", {"NAME": "Ada"}) == "Hi Ada at {{UNIT}}"

    def test_strict_lists_missing_names(self):
        with pytest.raises(ValidationError) as exc:
            fill_variables("{{A}} {{B}} {{C}}", {"B": "x"}, strict=True)
        assert "A, C" in exc.value.message
        assert exc.value.field == "values"

    def test_strict_with_all_values(self):
        assert fill_variables("{{A}}-{{B}}", {"A": 1, "B": 2}, strict=True) == "1-2"
