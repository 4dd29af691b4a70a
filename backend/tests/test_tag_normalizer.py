import pytest

from app.core.services.tag_normalizer import (
    PRESERVED_TERMS,
    compare_two_strings,
    find_best_match,
    find_similar_tag,
    normalize_tag,
    process_tags,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("  Machine Learning  ", "machine learning"),
        ("The Databases", "database"),
        ("an  Apples", "apple"),
        ("Stories", "story"),
        ("Boxes", "box"),
        ("Classes", "class"),
        ("Watches", "watch"),
        ("Images", "image"),
        ("status", "status"),
        ("analysis", "analysis"),
        ("class", "class"),
        ("is", "is"),
        ("ies", "ies"),
        ("as", "as"),
        ("Go", "go"),
    ],
)
def test_normalize_tag(raw, expected):
    assert normalize_tag(raw) == expected


@pytest.mark.parametrize("raw", ["", None, "   ", "\t\n"])
def test_normalize_tag_empty_results(raw):
    assert normalize_tag(raw) == ""


def test_bare_article_is_kept_as_a_word():
    assert normalize_tag("The") == "the"
    assert normalize_tag("a") == "a"


@pytest.mark.parametrize("term", sorted(PRESERVED_TERMS))
def test_preserved_terms_are_only_lowercased(term):
    assert normalize_tag(f"  {term.upper()} ") == term


def test_preserved_term_behind_article():
    assert normalize_tag("The News") == "news"


@pytest.mark.parametrize(
    "raw",
    [
        "The Classes",
        "Libraries",
        "Buses",
        "Glasses",
        "Machine-Learning",
        "an apis",
        "the the boxes",
        "Kubernetes",
        "Indices",
        "Series",
        "Pages",
        "Ss",
        "hob a s",
        "ubsthe s",
        "an us s",
        "d s",
        "cats s",
    ],
)
def test_normalize_tag_is_idempotent(raw):
    once = normalize_tag(raw)
    assert normalize_tag(once) == once


def test_lone_trailing_s_word_is_not_stripped_into_a_space():
    assert normalize_tag("hob a s") == "hob a s"
    assert normalize_tag("an us s") == "us s"
    assert not normalize_tag("d s").endswith(" ")


def test_process_tags_is_idempotent_with_single_letter_words():
    once = process_tags(["b", "debe", "dssbeis", "d s", "d "], [])

    assert once == ["b", "debe", "dssbeis", "d s", "d"]
    assert all(tag == tag.strip() for tag in once)
    assert process_tags(once, once) == once


def test_compare_two_strings_bounds():
    assert compare_two_strings("python", "python") == 1.0
    assert compare_two_strings("a", "b") == 0.0
    assert compare_two_strings("abc", "xyz") == 0.0
    score = compare_two_strings("machine-learning", "machine learning")
    assert 0.85 <= score < 1.0


def test_compare_two_strings_ignores_whitespace():
    assert compare_two_strings("data base", "database") == 1.0


def test_find_best_match_empty_choices():
    assert find_best_match("python", []) is None


def test_find_best_match_prefers_highest_score():
    choice, score = find_best_match("javascript", ["java", "javascripts", "rust"])
    assert choice == "javascripts"
    assert score > 0.9


def test_find_similar_tag_exact_after_normalization_returns_existing_spelling():
    assert find_similar_tag("Images", ["image"]) == "image"
    assert find_similar_tag("the Databases", ["Database"]) == "Database"


def test_find_similar_tag_fuzzy_match():
    assert find_similar_tag("machine-learning", ["machine learning", "python"]) == "machine learning"


def test_find_similar_tag_below_threshold():
    assert find_similar_tag("rust", ["python", "javascript"]) is None


def test_find_similar_tag_empty_vocabulary():
    assert find_similar_tag("python", []) is None


def test_find_similar_tag_custom_threshold():
    assert find_similar_tag("react", ["reactjs"], threshold=0.99) is None
    assert find_similar_tag("react", ["reactjs"], threshold=0.5) == "reactjs"


def test_process_tags_keeps_distinct_concepts_without_vocabulary():
    result = process_tags(["AI", "a.i.", "artificial intelligence"], [])
    assert "artificial intelligence" in result
    assert result[0] == "ai"
    assert len(result) == len(set(result))


def test_process_tags_empty_input():
    assert process_tags([], ["python", "rust"]) == []


def test_process_tags_drops_empty_tags():
    assert process_tags(["", "   ", None], ["python"]) == []


def test_process_tags_folds_onto_existing_vocabulary():
    existing = ["machine learning", "Database"]
    result = process_tags(["Machine-Learning", "databases", "Kubernetes"], existing)
    assert result == ["machine learning", "Database", "kubernetes"]


def test_process_tags_collapses_duplicates_in_order():
    assert process_tags(["APIs", "apis", "Testing", "testings"], []) == ["apis", "testing"]


def test_process_tags_idempotent_on_canonical_tags():
    canonical = ["python", "machine learning", "news", "database"]
    assert process_tags(canonical, canonical) == canonical
