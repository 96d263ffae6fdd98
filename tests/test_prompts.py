import _bootstrap  # noqa: F401

from haiku_assistant.models import CUSTOM_THEME, GenerationRequest, HaikuCandidate
from haiku_assistant.prompts import AttemptFeedback, system_prompt, user_prompt
from haiku_assistant.validation import validate


def test_system_prompt_states_the_structure():
    assert "5-7-5" in system_prompt()
    assert "UNIQUEMENT" in system_prompt()


def test_user_prompt_mentions_theme_and_keywords():
    prompt = user_prompt(GenerationRequest(theme="Nature", keywords=["fleur", " lune "]))
    assert 'thème "Nature"' in prompt
    assert "mots-clés: fleur, lune" in prompt
    assert "tentative précédente" not in prompt


def test_user_prompt_uses_custom_theme():
    request = GenerationRequest(theme=CUSTOM_THEME, keywords=["pluie"], custom_theme="Un jardin sous la pluie")
    assert 'thème "Un jardin sous la pluie"' in user_prompt(request)


def test_feedback_describes_previous_attempt():
    candidate = HaikuCandidate("La fleur sur toit", "Le vent doux danse sous la lune", "Un chat dort sans bruit")
    feedback = AttemptFeedback(candidate, validate(candidate))
    prompt = user_prompt(GenerationRequest(theme="Nature", keywords=["fleur"]), feedback)
    assert "4-7-5" in prompt
    assert "> La fleur sur toit" in prompt
    assert "- Première ligne: 4 syllabes (attendu: 5)" in prompt
