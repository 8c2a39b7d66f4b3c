import pytest

from worksafe.core.errors import ErrorKind, InvalidModelResponse
from worksafe.services.normalizer import (
    extract_json_payload,
    normalize_model_output,
    validate_risks,
)

from conftest import risks_json


def _titles(result):
    return [risk.title for risk in result.risks]


def test_well_formed_output_is_returned_unchanged_in_order():
    text = risks_json(
        {"title": "Blocked exit", "level": "high", "recommendation": "Clear the exit"},
        {"title": "Loose cable", "level": "medium", "recommendation": "Tape it down"},
        {"title": "Dim lighting", "level": "low", "recommendation": "Add lamps"},
    )

    result = normalize_model_output(text)

    assert _titles(result) == ["Blocked exit", "Loose cable", "Dim lighting"]
    assert [risk.level for risk in result.risks] == ["high", "medium", "low"]
    assert normalize_model_output(text) == result


def test_json_is_extracted_from_surrounding_prose():
    text = (
        'Sure! Here is the analysis: {"risks":[{"title":"Missing hard hat",'
        '"level":"high","recommendation":"Provide PPE"}]}'
    )

    result = normalize_model_output(text)

    assert len(result.risks) == 1
    assert result.risks[0].title == "Missing hard hat"
    assert result.risks[0].level == "high"


def test_json_is_extracted_from_markdown_fence():
    text = (
        "Analysis below.\n```json\n"
        '{"risks": [{"title": "Wet floor", "level": "medium", "recommendation": "Place a sign"}]}\n'
        "```\nStay safe! {not json}"
    )

    result = normalize_model_output(text)

    assert _titles(result) == ["Wet floor"]


def test_invalid_entries_are_dropped_silently():
    text = (
        '{"risks":[{"title":"","level":"high","recommendation":"x"},'
        '{"title":"t","level":"extreme","recommendation":"y"},'
        '{"title":"ok","level":"low","recommendation":"fine"}]}'
    )

    result = normalize_model_output(text)

    assert len(result.risks) == 1
    assert result.risks[0].title == "ok"
    assert result.risks[0].level == "low"


def test_empty_risks_is_a_valid_result():
    assert normalize_model_output('{"risks": []}').risks == []


def test_text_is_trimmed_and_coerced():
    risks = validate_risks(
        [
            {"title": "  Spill near press  ", "level": "medium", "recommendation": " Mop it \n"},
            {"title": 42, "level": "low", "recommendation": "Label rack 42"},
        ]
    )

    assert risks[0].title == "Spill near press"
    assert risks[0].recommendation == "Mop it"
    assert risks[1].title == "42"


@pytest.mark.parametrize(
    "entry",
    [
        {"title": "   ", "level": "high", "recommendation": "x"},
        {"title": "t", "level": "High", "recommendation": "x"},
        {"title": "t", "level": "low"},
        {"title": "t", "level": ["low"], "recommendation": "x"},
        "just a string",
        None,
    ],
)
def test_malformed_entry_is_dropped(entry):
    assert validate_risks([entry]) == []


def test_unparseable_output_raises():
    with pytest.raises(InvalidModelResponse) as exc_info:
        normalize_model_output("I am unable to analyze this image.")

    assert exc_info.value.message == "Failed to parse AI response"
    assert exc_info.value.status_code == 500
    assert exc_info.value.kind == ErrorKind.INVALID_PROVIDER_RESPONSE


def test_truncated_json_raises_parse_error():
    with pytest.raises(InvalidModelResponse, match="Failed to parse AI response"):
        normalize_model_output('Here you go: {"risks": [{"title": "Ladder"')


@pytest.mark.parametrize(
    "text",
    ['{"hazards": []}', '{"risks": "none"}', "[1, 2, 3]", '{"risks": {"title": "x"}}'],
)
def test_wrong_shape_raises_invalid_format(text):
    with pytest.raises(InvalidModelResponse, match="Invalid response format from AI"):
        normalize_model_output(text)


def test_extract_returns_whole_text_json_first():
    assert extract_json_payload('  {"risks": []}  ') == {"risks": []}
