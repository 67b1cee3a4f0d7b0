from calfeed.services.feed.filters import FilterRule


def test_match_is_case_insensitive():
    rule = FilterRule(["Lean Management"])
    assert rule.matches("SUMMARY:LEAN management (Übung)") == "Lean Management"


def test_match_is_union_of_phrases():
    rule = FilterRule(["Ökonometrie", "Wirtschaftsenglisch"])
    assert rule.matches("SUMMARY:wirtschaftsenglisch") == "Wirtschaftsenglisch"
    assert rule.matches("SUMMARY:ÖKONOMETRIE") == "Ökonometrie"
    assert rule.matches("SUMMARY:Datenbanken") is None


def test_phrases_are_literal_not_patterns():
    """Regex metacharacters in phrases are matched literally"""
    rule = FilterRule(["C++ (Grundlagen)"])
    assert rule.matches("SUMMARY:c++ (grundlagen)") == "C++ (Grundlagen)"
    assert rule.matches("SUMMARY:C (Grundlagen)") is None


def test_blank_and_duplicate_phrases_are_ignored():
    rule = FilterRule(["", "  ", "Lean", "lean"])
    assert len(rule) == 1
    assert rule.phrases == ["Lean"]


def test_empty_rule_matches_nothing():
    rule = FilterRule()
    assert not rule
    assert rule.matches("anything") is None
