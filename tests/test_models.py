import _bootstrap  # noqa: F401

import pytest

from haiku_assistant.models import CUSTOM_THEME, ErrorKind, GenerationRequest, HaikuCandidate, HaikuRecord


def test_request_with_suggested_theme_is_valid():
    assert GenerationRequest(theme="Nature", keywords=["fleur"]).validate() == []
    assert GenerationRequest(theme="seasons", keywords=["neige", "froid"]).validate() == []
    assert GenerationRequest(theme="émotions", keywords=["joie"]).validate() == []


def test_unknown_theme_is_rejected():
    problems = GenerationRequest(theme="Volcans", keywords=["lave"]).validate()
    assert problems == ["Thème inconnu: Volcans"]


def test_keyword_count_is_bounded():
    assert GenerationRequest(theme="Nature", keywords=[]).validate() == ["Au moins un mot-clé est requis"]
    assert GenerationRequest(theme="Nature", keywords=["  "]).validate() == ["Au moins un mot-clé est requis"]
    too_many = GenerationRequest(theme="Nature", keywords=["a", "b", "c", "d", "e", "f"])
    assert too_many.validate() == ["Maximum 5 mots-clés autorisés"]


@pytest.mark.parametrize(
    "text, message",
    [
        (None, "Le thème personnalisé ne peut pas être vide"),
        ("  ", "Le thème personnalisé ne peut pas être vide"),
        ("ab", "Le thème doit contenir au moins 3 caractères"),
        ("x" * 201, "Le thème ne peut pas dépasser 200 caractères"),
    ],
)
def test_custom_theme_length(text, message):
    request = GenerationRequest(theme=CUSTOM_THEME, keywords=["pluie"], custom_theme=text)
    assert request.validate() == [message]


def test_custom_theme_overrides_marker():
    request = GenerationRequest(theme=CUSTOM_THEME, keywords=["pluie"], custom_theme=" Un jardin sous la pluie ")
    assert request.validate() == []
    assert request.resolved_theme == "Un jardin sous la pluie"
    assert GenerationRequest(theme="Nature", keywords=["x"], custom_theme="ignored").resolved_theme == "Nature"


def test_candidate_from_lines():
    candidate = HaikuCandidate.from_lines(["a", "b", "c"])
    assert candidate.lines == ("a", "b", "c")
    with pytest.raises(ValueError):
        HaikuCandidate.from_lines(["a", "b"])


def test_error_kinds_know_whether_to_retry():
    retryable = {kind for kind in ErrorKind if kind.retryable}
    assert retryable == {
        ErrorKind.TRANSPORT_FAILURE,
        ErrorKind.SERVER_FAILURE,
        ErrorKind.EMPTY_RESPONSE,
        ErrorKind.MALFORMED_RESPONSE,
        ErrorKind.STRUCTURE_INVALID,
    }


def test_record_text_export():
    record = HaikuRecord(id="1", lines=("un", "deux", "trois"), theme="Nature")
    assert record.as_text() == "un\ndeux\ntrois\n\n— Nature"
