import pytest

from app.jobboard.text_search import build_document, build_search_query, tokenize


def _doc(title="", skills="", description=""):
    return build_document([(title, "A"), (skills, "B"), (description, "C")])


def test_tokenize_lowercases_and_splits_on_punctuation():
    assert tokenize("Senior Rust/Go Engineer, (remote)") == ["senior", "rust", "go", "engineer", "remote"]
    assert tokenize("snake_case") == ["snake", "case"]
    assert tokenize(None) == []


def test_document_keeps_strongest_weight_and_all_positions():
    doc = _doc(title="Rust developer", description="We love rust")

    assert doc["rust"] == {"w": "A", "p": [1, 5]}
    assert doc["love"] == {"w": "C", "p": [4]}


@pytest.mark.parametrize("text", [None, "", "   ", "!!! ...", "-", '""'])
def test_queries_without_lexemes_are_no_constraint(text):
    assert build_search_query(text) is None


def test_last_word_matches_as_prefix():
    doc = _doc(title="Rust developer")

    assert build_search_query("rust dev").matches(doc)
    assert build_search_query("rust developer").matches(doc)
    assert not build_search_query("rust designer").matches(doc)


def test_only_the_last_word_is_expanded():
    doc = _doc(title="Rust developer")

    assert not build_search_query("ru developer").matches(doc)


def test_terms_are_anded():
    doc = _doc(title="Backend engineer", skills="python")

    assert build_search_query("python backend").matches(doc)
    assert not build_search_query("golang backend").matches(doc)


def test_or_between_terms():
    query = build_search_query("rust or golang")

    assert query.matches(_doc(title="Golang engineer"))
    assert query.matches(_doc(title="Rust engineer"))
    assert not query.matches(_doc(title="Python engineer"))


def test_negated_terms_exclude():
    query = build_search_query("python -django")

    assert query.matches(_doc(title="Python engineer", skills="flask"))
    assert not query.matches(_doc(title="Python engineer", skills="django"))


def test_quoted_phrase_requires_adjacent_words():
    query = build_search_query('"site reliability"')

    assert query.matches(_doc(title="Site Reliability Engineer"))
    assert not query.matches(_doc(title="Reliability of the site"))


def test_title_matches_rank_above_description_matches():
    query = build_search_query("kubernetes")

    in_title = query.rank(_doc(title="Kubernetes operator"))
    in_skills = query.rank(_doc(title="Engineer", skills="kubernetes"))
    in_description = query.rank(_doc(title="Engineer", description="we run kubernetes"))

    assert in_title > in_skills > in_description > 0


def test_missing_document_does_not_match():
    assert not build_search_query("rust").matches(None)


def test_back_matches_backend_but_back_end_needs_both_words():
    backend = _doc(title="Backend engineer")
    back_end = _doc(title="Back end engineer")

    assert build_search_query("back").matches(backend)
    assert not build_search_query("back end").matches(backend)
    assert build_search_query("back end").matches(back_end)
    assert build_search_query("back eng").matches(back_end)
