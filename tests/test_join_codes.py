from types import SimpleNamespace

from focusroom.functions.join_codes import (
    JOIN_CODE_ALPHABET, JOIN_CODE_LENGTH, generate_join_code, join_code_matches
)


def test_alphabet_excludes_confusable_characters():
    assert len(JOIN_CODE_ALPHABET) == 32
    assert len(set(JOIN_CODE_ALPHABET)) == 32
    for ch in '01IO':
        assert ch not in JOIN_CODE_ALPHABET


def test_generated_codes_use_alphabet():
    for _ in range(50):
        code = generate_join_code()
        assert len(code) == JOIN_CODE_LENGTH
        assert set(code) <= set(JOIN_CODE_ALPHABET)


def test_match_is_case_sensitive_and_requires_a_code():
    room = SimpleNamespace(join_code='AB23CD')
    assert join_code_matches(room, 'AB23CD')
    assert not join_code_matches(room, 'ab23cd')
    assert not join_code_matches(room, 'XXXXXX')
    assert not join_code_matches(room, None)
    assert not join_code_matches(room, '')
    assert not join_code_matches(SimpleNamespace(join_code=None), 'AB23CD')
