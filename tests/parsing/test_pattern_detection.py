# tests/parsing/test_pattern_detection.py
import pytest

from parser.services.html_parse_service import HTMLParser
from parser.services.pattern_detect_service import (
    PatternDetector,
    element_identifier,
    normalize_pattern_name,
)

CARD = '<div class="card"><h2>Title</h2><p>Body</p></div>'
CARDS = f"<section>{CARD * 3}</section>"


@pytest.fixture
def detector():
    return PatternDetector(min_pattern_occurrences=2)


def test_identical_cards_form_confident_pattern(detector):
    """Test that three identical cards yield one 'card' pattern with confidence > 0.8."""
    patterns = detector.detect_patterns(CARDS)
    cards = [p for p in patterns if p.pattern == "card"]
    assert len(cards) == 1
    assert cards[0].count == 3
    assert cards[0].confidence > 0.8
    assert cards[0].elements == ["card (div)"] * 3
    assert cards[0].pattern_type == "card"


def test_confidences_are_bounded(detector):
    """Test that every confidence stays within [0, 1]."""
    html = (
        "<div>"
        '<ul class="menu"><li>a</li><li>b</li><li><a href="#">c</a></li></ul>'
        '<div class="hero"><h1>Hi</h1></div>'
        f"{CARDS}"
        '<div class="item"><span>x</span></div><div class="item"><img src="a.png"></div>'
        "</div>"
    )
    patterns = detector.detect_patterns(html)
    assert patterns
    assert all(0.0 <= p.confidence <= 1.0 for p in patterns)


def test_single_occurrence_is_not_a_pattern(detector):
    """Test that a lone classed element is ignored unless its name is section-level."""
    patterns = detector.detect_patterns('<div><div class="widget"><p>x</p></div></div>')
    assert [p.pattern for p in patterns] == []


def test_semantic_name_counts_on_single_occurrence(detector):
    """Test that a section-level name such as 'hero' is reported even once."""
    patterns = detector.detect_patterns('<div><div class="hero"><h1>x</h1></div></div>')
    assert [p.pattern for p in patterns] == ["hero"]


def test_empty_source(detector):
    """Test that empty input yields no patterns."""
    assert detector.detect_patterns("") == []
    assert detector.detect_patterns(None) == []


def test_similarity():
    """Test the tag-multiset similarity measure."""
    assert PatternDetector.calculate_similarity(CARD, CARD) == 1.0
    assert PatternDetector.calculate_similarity("<div><p></p></div>", "<div><span></span></div>") == pytest.approx(1 / 3)
    assert PatternDetector.calculate_similarity("", "<p></p>") == 0.0


def test_single_member_has_no_bonus(detector):
    """Test that a one-element group scores 0.3 * 0.2 + 0.7."""
    node = HTMLParser().parse(CARD).root
    assert detector.calculate_pattern_confidence([node]) == pytest.approx(0.76)


def test_is_repeating_pattern(detector):
    """Test the repeat check against the occurrence minimum and similarity threshold."""
    assert detector.is_repeating_pattern([CARD, CARD])
    assert not detector.is_repeating_pattern([CARD])
    assert not detector.is_repeating_pattern(["<p></p>", "<table><tr><td></td></tr></table>"])


def test_classification_and_names():
    """Test pattern classification and name normalization."""
    assert PatternDetector.classify_pattern("product-tile") == "card"
    assert PatternDetector.classify_pattern("main-menu") == "nav"
    assert PatternDetector.classify_pattern("news__item") == "list"
    assert normalize_pattern_name(".card__body") == "card-body"
    assert PatternDetector.is_semantic_pattern("#footer")


def test_group_by_pattern(detector):
    """Test grouping selectors by their classified pattern type."""
    groups = detector.group_by_pattern(["card", "nav-link", "product", "footer-note"])
    assert groups == {"card": ["card", "product"], "nav": ["nav-link"], "unknown": ["footer-note"]}


def test_members_are_listed_by_identifier(detector):
    """Test that members are listed with the selector and tag identifier."""
    document = HTMLParser().parse(CARDS)
    pattern = detector.detect_patterns(document)[0]
    assert pattern.elements == [element_identifier(n) for n in document.root.element_children]
