from math import log

import pytest

from zhcut.dag import calc, cut_route, get_DAG
from zhcut.lexicon import Lexicon


@pytest.fixture
def view(small_dict):
    lex = Lexicon()
    lex.load(small_dict)
    return lex.view


def test_dag_of_bundled_dictionary(tokenizer):
    assert tokenizer.get_DAG(u"我来到北京清华大学") == {
        0: [0], 1: [1, 2], 2: [2], 3: [3, 4], 4: [4],
        5: [5, 6, 8], 6: [6, 7], 7: [7, 8], 8: [8],
    }


def test_dag_always_reaches_next_char(view):
    dag = get_DAG(u"我去北京大学", view)
    assert dag == {0: [0], 1: [1], 2: [2, 3], 3: [3], 4: [4, 5], 5: [5]}
    for k, ends in dag.items():
        assert ends[0] == k
        assert ends == sorted(ends)


def test_calc_route_scores(view):
    sentence = u"来到北京"
    dag = get_DAG(sentence, view)
    route = {}
    calc(sentence, dag, route, view)
    assert route[4] == (0, 0)
    assert route[2][1] == 3
    assert route[0][1] == 1
    logtotal = log(330)
    assert route[0][0] == pytest.approx(log(50) - logtotal + log(80) - logtotal)


def test_unknown_char_uses_floor(view):
    sentence = u"去"
    dag = get_DAG(sentence, view)
    route = {}
    calc(sentence, dag, route, view)
    assert route[0] == (pytest.approx(log(5) - log(330)), 0)


def test_cut_route_covers_sentence(view):
    sentence = u"我去北京大学来到"
    words = cut_route(sentence, view)
    assert words == [u"我", u"去", u"北京", u"大学", u"来到"]
    assert u"".join(words) == sentence


def test_empty_sentence(view):
    assert get_DAG(u"", view) == {}
    assert cut_route(u"", view) == []
