import pytest

from lexitrack.languages import (
    extract_morph_features,
    get_language_config,
    get_supported_language_codes,
    get_supported_languages,
    is_language_supported,
)


@pytest.mark.parametrize("form,pos,expected", [
    ("читаю", "VERB", {"person": "1", "number": "sing", "tense": "pres"}),
    ("читаешь", "VERB", {"person": "2", "number": "sing", "tense": "pres"}),
    ("читала", "VERB", {"tense": "past", "gender": "fem"}),
    ("котов", "NOUN", {"number": "plur", "case": "gen"}),
    ("книгу", "NOUN", {"number": "sing", "case": "acc"}),
    ("красивая", "ADJ", {"gender": "fem", "number": "sing", "case": "nom"}),
])
def test_russian_suffix_rules(form, pos, expected):
    assert extract_morph_features(form, pos, "ru") == expected


def test_spanish_suffix_rules():
    assert extract_morph_features("hablas", "VERB", "es") == {"person": "2", "number": "sing", "tense": "pres"}


def test_no_rules_for_part_of_speech():
    assert extract_morph_features("привет", "INTJ", "ru") == {}


def test_no_matching_rule():
    assert extract_morph_features("кот", "NOUN", "ru") == {}


def test_unknown_language_falls_back_to_default():
    assert get_language_config("xx").code == "ru"
    assert not is_language_supported("xx")


def test_supported_languages():
    assert get_supported_language_codes() == ["ru", "es"]
    codes = [language["code"] for language in get_supported_languages()]
    assert codes == ["ru", "es"]
    assert all(language["native_name"] for language in get_supported_languages())
