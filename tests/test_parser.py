"""
Completion parsing: the model gives no schema guarantee, so these cases
cover the shapes a real model produces.
"""

import json
from decimal import Decimal

import pytest

from app.core.constants.whatsapp_responses import GREETING_MESSAGE
from app.intelligence.categorization.constants import TransactionCategory, TransactionType
from app.intelligence.extraction.parser import (
    InvalidFieldError,
    find_json_object,
    parse_amount,
    parse_completion,
)
from app.intelligence.extraction.types import (
    Advisory,
    Malformed,
    MalformedReason,
    TransactionCandidate,
)


def completion(**fields) -> str:
    return json.dumps(fields, ensure_ascii=False)


class TestTransactionParsing:
    def test_valid_expense(self):
        result = parse_completion(
            completion(
                isTransaction=True,
                type="expense",
                amount=50,
                category="food",
                description="Almoço",
            )
        )
        assert isinstance(result, TransactionCandidate)
        assert result.type == TransactionType.EXPENSE
        assert result.amount == Decimal("50.00")
        assert result.category == TransactionCategory.FOOD
        assert result.description == "Almoço"

    def test_prose_and_fences_around_json(self):
        raw = (
            "Claro! Aqui está:\n```json\n"
            + completion(isTransaction=True, type="income", amount="2000", category="salary", description="Salário")
            + "\n```\nQualquer dúvida, é só chamar."
        )
        result = parse_completion(raw)
        assert isinstance(result, TransactionCandidate)
        assert result.type == TransactionType.INCOME
        assert result.amount == Decimal("2000.00")

    def test_category_and_type_are_case_insensitive(self):
        result = parse_completion(
            completion(isTransaction=True, type=" Expense ", amount=10, category="BILLS")
        )
        assert isinstance(result, TransactionCandidate)
        assert result.category == TransactionCategory.BILLS
        assert result.description == ""

    def test_unknown_category_is_invalid_field(self):
        result = parse_completion(
            completion(isTransaction=True, type="expense", amount=10, category="pets")
        )
        assert isinstance(result, Malformed)
        assert result.reason == MalformedReason.INVALID_FIELD
        assert result.field == "category"

    def test_unknown_type_is_invalid_field(self):
        result = parse_completion(
            completion(isTransaction=True, type="transfer", amount=10, category="other")
        )
        assert isinstance(result, Malformed)
        assert result.field == "type"

    @pytest.mark.parametrize("amount", [0, -5, "abc", None, True, 0.001])
    def test_bad_amount_is_invalid_field(self, amount):
        result = parse_completion(
            completion(isTransaction=True, type="expense", amount=amount, category="food")
        )
        assert isinstance(result, Malformed)
        assert result.reason == MalformedReason.INVALID_FIELD
        assert result.field == "amount"

    def test_non_string_description_is_invalid_field(self):
        result = parse_completion(
            completion(isTransaction=True, type="expense", amount=5, category="food", description=42)
        )
        assert isinstance(result, Malformed)
        assert result.field == "description"


class TestAmount:
    def test_rounds_half_up_to_cents(self):
        assert parse_amount(49.999) == Decimal("50.00")
        assert parse_amount("10.005") == Decimal("10.01")
        assert parse_amount(12.3) == Decimal("12.30")

    def test_rejects_non_finite(self):
        with pytest.raises(InvalidFieldError):
            parse_amount(float("inf"))
        with pytest.raises(InvalidFieldError):
            parse_amount("NaN")

    def test_rejects_too_large(self):
        with pytest.raises(InvalidFieldError):
            parse_amount(10**12)


class TestAdvisoryParsing:
    def test_advisory_response(self):
        result = parse_completion(
            completion(isTransaction=False, response="Olá! Como posso ajudar?")
        )
        assert isinstance(result, Advisory)
        assert result.response_text == "Olá! Como posso ajudar?"

    def test_advisory_is_truncated(self):
        result = parse_completion(
            completion(isTransaction=False, response="x" * 50), max_advisory_length=20
        )
        assert isinstance(result, Advisory)
        assert len(result.response_text) == 20

    def test_blank_advisory_falls_back_to_greeting(self):
        result = parse_completion(completion(isTransaction=False, response="  "))
        assert isinstance(result, Advisory)
        assert result.response_text == GREETING_MESSAGE


class TestUnparseable:
    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "Não entendi",
            "{not json}",
            '{"type": "expense", "amount": 10}',
            '{"isTransaction": "yes"}',
            "[1, 2, 3]",
        ],
    )
    def test_unparseable(self, raw):
        result = parse_completion(raw)
        assert isinstance(result, Malformed)
        assert result.reason == MalformedReason.UNPARSEABLE
        assert result.raw_text == raw

    def test_find_json_object_skips_broken_braces(self):
        assert find_json_object('a {b} then {"isTransaction": false}') == {"isTransaction": False}
