import logging
import os

import pytest

import zhcut
from zhcut import CutMode, InvalidModeError, Token, TokenizeMode


SENTENCES = [
    u"我来到北京清华大学",
    u"小明硕士毕业于中国科学院计算所，后在日本京都大学深造",
    u"我是拖拉机学院手扶拖拉机专业的。不用多久，我就会升职加薪，当上CEO，走上人生巅峰。",
    u"他来到了网易杭研大厦 3.14% of C++ users\n南京市长江大桥",
    u"我们中出了一个叛徒",
]


def test_cut_default():
    assert zhcut.lcut(u"我来到北京清华大学") == [u"我", u"来到", u"北京", u"清华大学"]
    assert zhcut.lcut(u"我来到北京清华大学", CutMode.HMM) == [u"我", u"来到", u"北京", u"清华大学"]


def test_cut_all():
    assert zhcut.lcut(u"我来到北京清华大学", CutMode.ALL) == [
        u"我", u"来", u"来到", u"到", u"北", u"北京", u"京", u"清", u"清华",
        u"清华大学", u"华", u"华大", u"大", u"大学", u"学"]


def test_cut_is_generator():
    result = zhcut.cut(u"我来到北京清华大学")
    assert next(result) == u"我"


def test_cut_for_search():
    sentence = u"小明硕士毕业于中国科学院计算所，后在日本京都大学深造"
    assert zhcut.lcut_for_search(sentence, CutMode.HMM) == [
        u"小明", u"硕士", u"毕业", u"于", u"中国", u"科学", u"学院", u"科学院",
        u"中国科学院", u"计算", u"计算所", u"，", u"后", u"在", u"日本", u"京都",
        u"大学", u"日本京都大学", u"深造"]


def test_tokenize_default():
    assert list(zhcut.tokenize(u"南京市长江大桥")) == [
        Token(u"南京市", 0, 3), Token(u"长江大桥", 3, 7)]


def test_tokenize_search():
    result = list(zhcut.tokenize(u"南京市长江大桥", TokenizeMode.SEARCH))
    assert [tuple(t) for t in result] == [
        (u"南京", 0, 2), (u"京市", 1, 3), (u"南京市", 0, 3),
        (u"长江", 3, 5), (u"大桥", 5, 7), (u"长江大桥", 3, 7)]
    assert result[0].word == u"南京"
    assert result[0].start == 0
    assert result[0].end == 2


@pytest.mark.parametrize('sentence', SENTENCES)
@pytest.mark.parametrize('cut_mode', [CutMode.DEFAULT, CutMode.HMM])
def test_tokenize_covers_input(sentence, cut_mode):
    pos = 0
    for token in zhcut.tokenize(sentence, cut_mode=cut_mode):
        assert token.start == pos
        assert sentence[token.start:token.end] == token.word
        pos = token.end
    assert pos == len(sentence)


@pytest.mark.parametrize('sentence', SENTENCES)
def test_tokenize_search_offsets(sentence):
    for token in zhcut.tokenize(sentence, TokenizeMode.SEARCH, CutMode.HMM):
        assert sentence[token.start:token.end] == token.word


@pytest.mark.parametrize('sentence', SENTENCES)
def test_all_mode_is_superset_of_default(sentence):
    assert set(zhcut.lcut(sentence, CutMode.ALL)) >= set(zhcut.lcut(sentence))


@pytest.mark.parametrize('sentence', SENTENCES)
def test_search_sub_tokens_are_words(sentence):
    default = set(zhcut.lcut(sentence))
    for word in zhcut.cut_for_search(sentence):
        if len(word) >= 2 and word not in default:
            assert zhcut.get_FREQ(word)


def test_user_word_overrides_split():
    sentence = u"我们中出了一个叛徒"
    assert zhcut.lcut(sentence) == [u"我们", u"中", u"出", u"了", u"一个", u"叛徒"]
    zhcut.add_word(u"中出", 10000, u"v")
    assert zhcut.lcut(sentence) == [u"我们", u"中出", u"了", u"一个", u"叛徒"]
    assert [tuple(t) for t in zhcut.tokenize(sentence, cut_mode=CutMode.HMM)] == [
        (u"我们", 0, 2), (u"中出", 2, 4), (u"了", 4, 5), (u"一个", 5, 7), (u"叛徒", 7, 9)]


def test_load_userdict_joins_word(tmp_path):
    sentence = u"我们中出了一个叛徒"
    status = zhcut.load_userdict(u"中出 10000\n".encode('utf-8'))
    assert status == 'Ok: 1 entries merged, 0 lines skipped'
    assert u"中出" in zhcut.lcut(sentence)

    zhcut.reset()
    path = tmp_path / 'userdict.txt'
    path.write_bytes(u"中出 10000 v\n".encode('utf-8'))
    zhcut.load_userdict(str(path))
    assert u"中出" in zhcut.lcut(sentence)


def test_set_userdict_replaces_session_words():
    zhcut.add_word(u"中出", 10000)
    zhcut.set_userdict(u"叛徒一个 5000\n".encode('utf-8'))
    assert zhcut.get_FREQ(u"中出") == 3
    assert zhcut.get_FREQ(u"叛徒一个") == 5000


def test_suggest_freq():
    assert zhcut.suggest_freq(u"中出") == 348
    assert zhcut.suggest_freq(u"出了") == 1263
    assert zhcut.suggest_freq((u"中", u"出")) == 3
    zhcut.add_word(u"中出", 10000)
    assert zhcut.suggest_freq(u"中出") == 10001
    zhcut.reset()
    assert zhcut.suggest_freq(u"中出") == 348


def test_suggest_freq_tune():
    sentence = u"我们中出了一个叛徒"
    freq = zhcut.suggest_freq(u"中出", True)
    assert zhcut.get_FREQ(u"中出") == freq
    assert u"中出" in zhcut.lcut(sentence)


def test_del_word_forces_split():
    sentence = u"我来到北京清华大学"
    zhcut.del_word(u"北京")
    assert u"北京" not in zhcut.lcut(sentence)
    assert u"北京" not in zhcut.lcut(sentence, CutMode.HMM)
    assert zhcut.get_FREQ(u"北京") == 0


def test_reset_restores_output():
    before = dict((s, zhcut.lcut(s, CutMode.HMM)) for s in SENTENCES)
    total = zhcut.dt.total
    zhcut.add_word(u"中出", 10000, u"v")
    zhcut.add_word(u"京清", 90000)
    zhcut.del_word(u"叛徒")
    zhcut.load_userdict(u"学院手扶 20000\n".encode('utf-8'))
    zhcut.reset()
    assert dict((s, zhcut.lcut(s, CutMode.HMM)) for s in SENTENCES) == before
    assert zhcut.dt.total == total
    zhcut.reset()
    assert dict((s, zhcut.lcut(s, CutMode.HMM)) for s in SENTENCES) == before


def test_modes_by_value_and_name():
    sentence = u"我来到北京清华大学"
    assert zhcut.lcut(sentence, 2) == zhcut.lcut(sentence, CutMode.ALL)
    assert zhcut.lcut(sentence, 'hmm') == zhcut.lcut(sentence, CutMode.HMM)
    assert list(zhcut.tokenize(sentence, 'search')) == list(
        zhcut.tokenize(sentence, TokenizeMode.SEARCH))


@pytest.mark.parametrize('call', [
    lambda: zhcut.cut(u"我来到北京", 5),
    lambda: zhcut.cut(u"我来到北京", 'bogus'),
    lambda: zhcut.cut(u"我来到北京", None),
    lambda: zhcut.cut(u"我来到北京", True),
    lambda: zhcut.cut(u"我来到北京", False),
    lambda: zhcut.cut_for_search(u"我来到北京", True),
    lambda: zhcut.tokenize(u"我来到北京", cut_mode=True),
    lambda: zhcut.cut_for_search(u"我来到北京", CutMode.ALL),
    lambda: zhcut.tokenize(u"我来到北京", 7),
    lambda: zhcut.tokenize(u"我来到北京", cut_mode=CutMode.ALL),
])
def test_invalid_modes_fail_fast(call):
    with pytest.raises(InvalidModeError):
        call()


def test_invalid_mode_is_value_error():
    with pytest.raises(ValueError):
        zhcut.lcut(u"我", 9)


def test_empty_input():
    assert zhcut.lcut(u"") == []
    assert zhcut.lcut(u"", CutMode.ALL) == []
    assert zhcut.lcut_for_search(u"") == []
    assert list(zhcut.tokenize(u"")) == []


def test_bytes_input():
    sentence = u"我来到北京清华大学"
    assert zhcut.lcut(sentence.encode('utf-8')) == zhcut.lcut(sentence)


def test_non_chinese_passthrough():
    words = zhcut.lcut(u"CEO 3.14")
    assert words[0] == u"CEO"
    assert u" " in words


def test_in_memory_base_dictionary(small_dict):
    tk = zhcut.Tokenizer()
    tk.load_base_dictionary(small_dict)
    assert tk.lcut(u"我来到北京大学") == [u"我", u"来到", u"北京", u"大学"]
    assert tk.total == 330


def test_custom_dictionary_cache(tmp_path, small_dict, caplog):
    path = tmp_path / 'dict.txt'
    path.write_bytes(small_dict)
    stamp = os.path.getmtime(str(path)) - 100
    os.utime(str(path), (stamp, stamp))
    tk = zhcut.Tokenizer(str(path))
    tk.tmp_dir = str(tmp_path)
    with caplog.at_level(logging.DEBUG, logger='zhcut'):
        assert tk.lcut(u"我来到北京") == [u"我", u"来到", u"北京"]
    caches = [p for p in os.listdir(str(tmp_path)) if p.endswith('.cache')]
    assert len(caches) == 1
    assert caches[0].startswith('zhcut.u')

    caplog.clear()
    tk2 = zhcut.Tokenizer(str(path))
    tk2.tmp_dir = str(tmp_path)
    with caplog.at_level(logging.DEBUG, logger='zhcut'):
        tk2.initialize()
    assert any('Loading model from cache' in r.getMessage() for r in caplog.records)
    assert tk2.lcut(u"我来到北京") == [u"我", u"来到", u"北京"]


def test_set_dictionary_missing_file(tmp_path):
    tk = zhcut.Tokenizer()
    with pytest.raises(IOError):
        tk.set_dictionary(str(tmp_path / 'missing.txt'))


def test_get_freq():
    assert zhcut.get_FREQ(u"北京") == 34488
    assert zhcut.get_FREQ(u"qwzx不存在") is None
    assert zhcut.get_FREQ(u"qwzx不存在", 0) == 0
