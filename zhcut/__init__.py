__version__ = '0.1.0'
__license__ = 'MIT'

import re
import os
import sys
import time
import logging
import marshal
import tempfile
import threading
from collections import namedtuple
from enum import IntEnum
from hashlib import md5
from ._compat import get_module_res, strdecode, string_types
from . import finalseg
from . import dag as _dag
from .errors import ZhcutError, NotInitializedError, InvalidModeError
from .lexicon import Lexicon, LexiconView

if os.name == 'nt':
    from shutil import move as _replace_file
else:
    _replace_file = os.rename

_get_abs_path = lambda path: os.path.normpath(os.path.join(os.getcwd(), path))

DEFAULT_DICT = None
DEFAULT_DICT_NAME = "dict.txt"

log_console = logging.StreamHandler(sys.stderr)
default_logger = logging.getLogger(__name__)
default_logger.setLevel(logging.DEBUG)
default_logger.addHandler(log_console)

DICT_WRITING = {}

"""
re_eng對應到單個英文或數字。
"""
re_eng = re.compile('[a-zA-Z0-9]', re.U)

"""
re_han_default的作用是與一個或多個漢字，英數字，+#&._%-等字元配對，這些區段會交給DAG處理。
re_skip_default用來切出空白，空白會原樣輸出。
"""
re_han_default = re.compile(
    r"([\u3400-\u4DBF\u4E00-\u9FFF\uF900-\uFAFFa-zA-Z0-9+#&\._%\-]+)", re.U)
re_skip_default = re.compile(r"(\r\n|\s)", re.U)


def setLogLevel(log_level):
    default_logger.setLevel(log_level)


class CutMode(IntEnum):
    """Segmentation modes accepted by cut/cut_for_search/tokenize/tag."""
    DEFAULT = 0
    HMM = 1
    ALL = 2


class TokenizeMode(IntEnum):
    DEFAULT = 0
    SEARCH = 1


SEGMENT_MODES = frozenset((CutMode.DEFAULT, CutMode.HMM))

Token = namedtuple('Token', ('word', 'start', 'end'))


def resolve_mode(mode_type, mode, allowed=None):
    """
    Turn `mode` (a member, its value or its name) into a `mode_type` member.

    Raises InvalidModeError for anything else, or for a member that is not
    in `allowed`.
    """
    if isinstance(mode, bool):
        # HMM=True/False 的舊式呼叫不是模式
        raise InvalidModeError('zhcut: invalid %s: %r' % (mode_type.__name__, mode))
    try:
        if isinstance(mode, string_types):
            resolved = mode_type[mode.upper()]
        else:
            resolved = mode_type(mode)
    except (KeyError, ValueError, TypeError):
        raise InvalidModeError('zhcut: invalid %s: %r' % (mode_type.__name__, mode))
    if allowed is not None and resolved not in allowed:
        raise InvalidModeError(
            'zhcut: %s.%s is not supported here' % (mode_type.__name__, resolved.name))
    return resolved


def iter_grams(w, lexicon):
    """
    Yields (gram, offset) for the dictionary 2-grams, then the dictionary
    3-grams, of a word longer than 2 (3-grams only when longer than 3).
    """
    if len(w) > 2:
        for i in range(len(w) - 1):
            gram2 = w[i:i + 2]
            if lexicon.get(gram2):
                yield gram2, i
    if len(w) > 3:
        for i in range(len(w) - 2):
            gram3 = w[i:i + 3]
            if lexicon.get(gram3):
                yield gram3, i


class Tokenizer(object):
    """
    __init__只定義屬性，分詞所必需的字典載入則延後至initialize函數中完成。
    字典本身由Lexicon管理，每次分詞開始時取一個LexiconView，整個呼叫都使用它。
    """

    def __init__(self, dictionary=DEFAULT_DICT):
        self.lock = threading.RLock()
        if dictionary == DEFAULT_DICT:
            self.dictionary = dictionary
        else:
            self.dictionary = _get_abs_path(dictionary)
        self.lexicon = Lexicon()
        self.initialized = False
        self.tmp_dir = None
        self.cache_file = None

    def __repr__(self):
        return '<Tokenizer dictionary=%r>' % self.dictionary

    @property
    def FREQ(self):
        self.check_initialized()
        return self.lexicon.view

    @property
    def total(self):
        return self.FREQ.total

    def initialize(self, dictionary=None):
        if dictionary:
            abs_path = _get_abs_path(dictionary)
            if self.dictionary == abs_path and self.initialized:
                return
            else:
                self.dictionary = abs_path
                self.initialized = False
        else:
            abs_path = self.dictionary

        with self.lock:
            try:
                with DICT_WRITING[abs_path]:
                    pass
            except KeyError:
                pass
            if self.initialized:
                return

            default_logger.debug("Building prefix dict from %s ..." % (abs_path or 'the default dictionary'))
            t1 = time.time()
            if self.cache_file:
                cache_file = self.cache_file
            # default dictionary
            elif abs_path == DEFAULT_DICT:
                cache_file = "zhcut.cache"
            # custom dictionary
            else:
                cache_file = "zhcut.u%s.cache" % md5(
                    abs_path.encode('utf-8', 'replace')).hexdigest()
            cache_file = os.path.join(
                self.tmp_dir or tempfile.gettempdir(), cache_file)
            # prevent absolute path in self.cache_file
            tmpdir = os.path.dirname(cache_file)

            load_from_cache_fail = True
            if os.path.isfile(cache_file) and (abs_path == DEFAULT_DICT or
                    os.path.getmtime(cache_file) > os.path.getmtime(abs_path)):
                default_logger.debug(
                    "Loading model from cache %s" % cache_file)
                try:
                    with open(cache_file, 'rb') as cf:
                        lfreq, ltotal, ltags = marshal.load(cf)
                    self.lexicon.restore(lfreq, ltotal, ltags)
                    load_from_cache_fail = False
                except Exception:
                    load_from_cache_fail = True

            if load_from_cache_fail:
                wlock = DICT_WRITING.get(abs_path, threading.RLock())
                DICT_WRITING[abs_path] = wlock
                with wlock:
                    with self.get_dict_file() as f:
                        self.lexicon.load(f)
                    default_logger.debug(
                        "Dumping model to file cache %s" % cache_file)
                    try:
                        # prevent moving across different filesystems
                        fd, fpath = tempfile.mkstemp(dir=tmpdir)
                        with os.fdopen(fd, 'wb') as temp_cache_file:
                            marshal.dump(
                                (self.lexicon.base_freq, self.lexicon.base_total,
                                 self.lexicon.base_tags), temp_cache_file)
                        _replace_file(fpath, cache_file)
                    except Exception:
                        default_logger.exception("Dump cache file failed.")

                try:
                    del DICT_WRITING[abs_path]
                except KeyError:
                    pass

            self.initialized = True
            default_logger.debug(
                "Loading model cost %.3f seconds." % (time.time() - t1))
            default_logger.debug("Prefix dict has been built successfully.")

    def check_initialized(self):
        if not self.initialized:
            self.initialize()

    def load_base_dictionary(self, f):
        """
        Initialize from an in-memory base dictionary instead of a file.

        `f` is raw bytes, an open file or an iterable of lines in the
        ``word freq tag`` format. Any session overlay is dropped.
        """
        with self.lock:
            self.lexicon.load(f)
            self.initialized = True

    def get_DAG(self, sentence):
        self.check_initialized()
        return _dag.get_DAG(sentence, self.lexicon.view)

    def calc(self, sentence, DAG, route):
        self.check_initialized()
        _dag.calc(sentence, DAG, route, self.lexicon.view)

    """
    全模式：輸出DAG裡的每一條邊，也就是句中所有可以成詞的部份(包含單字)。
    英數字在預設模式下會被合併成一個詞，這些詞不是DAG的邊，所以另外在它們的起點輸出，
    讓全模式的結果一定包含預設模式的結果。
    """
    def __cut_all(self, sentence, lexicon):
        dag = _dag.get_DAG(sentence, lexicon)
        runs = {}
        start = 0
        for w, _ in self.__cut_DAG_NO_HMM(sentence, lexicon):
            end = start + len(w) - 1
            if end not in dag[start]:
                runs[start] = w
            start = end + 1
        for k in range(len(sentence)):
            if k in runs:
                yield runs[k]
            for j in dag[k]:
                yield sentence[k:j + 1]

    """
    利用calc函數算出route，因為英數字並不存在字典中，所以route裡的英數字會被切成一個一個的字元。
    使用re_eng來找出句中的英數字，如果碰到了，就把它們放到buf裡，碰到下個詞時再輸出。
    """
    def __cut_DAG_NO_HMM(self, sentence, lexicon):
        DAG = _dag.get_DAG(sentence, lexicon)
        route = {}
        _dag.calc(sentence, DAG, route, lexicon)
        x = 0
        N = len(sentence)
        buf = ''
        while x < N:
            y = route[x][1] + 1
            l_word = sentence[x:y]
            if re_eng.match(l_word) and len(l_word) == 1:
                buf += l_word
                x = y
            else:
                if buf:
                    yield buf, False
                    buf = ''
                yield l_word, False
                x = y
        if buf:
            yield buf, False
            buf = ''

    """
    連續的單字詞先收集到buf裡，碰到多字詞或句尾時再處理：
    只有一個字就直接輸出；整個buf是詞典裡的詞就拆成單字輸出；否則交給HMM找出新詞。
    """
    def __cut_DAG(self, sentence, lexicon):
        DAG = _dag.get_DAG(sentence, lexicon)
        route = {}
        _dag.calc(sentence, DAG, route, lexicon)
        x = 0
        buf = ''
        N = len(sentence)
        while x < N:
            y = route[x][1] + 1
            l_word = sentence[x:y]
            if y - x == 1:
                buf += l_word
            else:
                if buf:
                    for t in self.__recognize(buf, lexicon):
                        yield t
                    buf = ''
                yield l_word, False
            x = y

        if buf:
            for t in self.__recognize(buf, lexicon):
                yield t

    def __recognize(self, buf, lexicon):
        if len(buf) == 1:
            yield buf, False
        elif not lexicon.get(buf):
            for t in finalseg.cut(buf, lexicon.force_split):
                yield t, True
        else:
            for elem in buf:
                yield elem, False

    def _cut_recognized(self, sentence, mode, lexicon):
        """
        Yields (word, recognized) pairs covering `sentence` in order;
        `recognized` is True for words that came out of the HMM.
        """
        if mode == CutMode.HMM:
            cut_block = self.__cut_DAG
        else:
            cut_block = self.__cut_DAG_NO_HMM
        blocks = re_han_default.split(sentence)
        for blk in blocks:
            if not blk:
                continue
            if re_han_default.match(blk):
                for item in cut_block(blk, lexicon):
                    yield item
            else:
                tmp = re_skip_default.split(blk)
                for x in tmp:
                    if re_skip_default.match(x):
                        yield x, False
                    else:
                        for xx in x:
                            yield xx, False

    def __cut_all_blocks(self, sentence, lexicon):
        blocks = re_han_default.split(sentence)
        for blk in blocks:
            if not blk:
                continue
            if re_han_default.match(blk):
                for word in self.__cut_all(blk, lexicon):
                    yield word
            else:
                tmp = re_skip_default.split(blk)
                for x in tmp:
                    if re_skip_default.match(x):
                        yield x
                    else:
                        for xx in x:
                            yield xx

    def cut(self, sentence, mode=CutMode.DEFAULT):
        '''
        The main function that segments an entire sentence that contains
        Chinese characters into separated words.

        Parameter:
            - sentence: The str(unicode) to be segmented.
            - mode: CutMode.DEFAULT for the dictionary-only accurate mode,
                    CutMode.HMM to also find new words with the Hidden
                    Markov Model, CutMode.ALL for every dictionary word.
        '''
        mode = resolve_mode(CutMode, mode)
        self.check_initialized()
        lexicon = self.lexicon.view
        sentence = strdecode(sentence)
        if mode == CutMode.ALL:
            return self.__cut_all_blocks(sentence, lexicon)
        return (w for w, _ in self._cut_recognized(sentence, mode, lexicon))

    def cut_for_search(self, sentence, mode=CutMode.DEFAULT):
        """
        Finer segmentation for search engines.
        """
        mode = resolve_mode(CutMode, mode, SEGMENT_MODES)
        self.check_initialized()
        return self.__cut_for_search(strdecode(sentence), mode, self.lexicon.view)

    def __cut_for_search(self, sentence, mode, lexicon):
        for w, _ in self._cut_recognized(sentence, mode, lexicon):
            for gram, _ in iter_grams(w, lexicon):
                yield gram
            yield w

    def lcut(self, *args, **kwargs):
        return list(self.cut(*args, **kwargs))

    def lcut_for_search(self, *args, **kwargs):
        return list(self.cut_for_search(*args, **kwargs))

    def get_dict_file(self):
        if self.dictionary == DEFAULT_DICT:
            return get_module_res(DEFAULT_DICT_NAME)
        else:
            return open(self.dictionary, 'rb')

    def load_userdict(self, f):
        '''
        Load personalized dict to improve detect rate.

        Parameter:
            - f : A plain text file contains words and their ocurrences.
                  Can be a file-like object, raw bytes, or the path of the
                  dictionary file, whose encoding must be utf-8.

        Structure of dict file:
        word1 freq1 word_type1
        word2 freq2 word_type2
        ...
        Word type may be ignored

        Returns a status message; malformed lines are skipped.
        '''
        self.check_initialized()
        return self.lexicon.merge(f)

    def set_userdict(self, f):
        """
        Replace every word added in this session with the content of `f`.
        """
        self.check_initialized()
        return self.lexicon.set_overlay(f)

    def reset(self):
        """
        Forget every word added, deleted or tuned since the base dictionary
        was loaded.
        """
        self.check_initialized()
        self.lexicon.reset()

    def add_word(self, word, freq=None, tag=None):
        """
        Add a word to dictionary.

        freq and tag can be omitted, freq defaults to be a calculated value
        that ensures the word can be cut out.
        """
        self.check_initialized()
        self.lexicon.add_word(word, freq, tag)

    def del_word(self, word):
        """
        Convenient function for deleting a word.
        """
        self.add_word(word, 0)

    def suggest_freq(self, segment, tune=False):
        """
        Suggest word frequency to force the characters in a word to be
        joined or splitted.

        Parameter:
            - segment : The segments that the word is expected to be cut into,
                        If the word should be treated as a whole, use a str.
            - tune : If True, tune the word frequency.

        Note that HMM may affect the final result. If the result doesn't change,
        use CutMode.DEFAULT.
        """
        self.check_initialized()
        return self.lexicon.suggest_freq(segment, tune)

    def tokenize(self, unicode_sentence, mode=TokenizeMode.DEFAULT, cut_mode=CutMode.DEFAULT):
        """
        Tokenize a sentence and yields Token(word, start, end) records.

        Parameter:
            - sentence: the str(unicode) to be segmented.
            - mode: TokenizeMode.DEFAULT or TokenizeMode.SEARCH, "search" is
                    for finer segmentation.
            - cut_mode: CutMode.DEFAULT or CutMode.HMM.
        """
        mode = resolve_mode(TokenizeMode, mode)
        cut_mode = resolve_mode(CutMode, cut_mode, SEGMENT_MODES)
        self.check_initialized()
        return self.__tokenize(strdecode(unicode_sentence), mode, cut_mode,
                               self.lexicon.view)

    def __tokenize(self, sentence, mode, cut_mode, lexicon):
        start = 0
        for w, _ in self._cut_recognized(sentence, cut_mode, lexicon):
            width = len(w)
            if mode == TokenizeMode.SEARCH:
                for gram, i in iter_grams(w, lexicon):
                    yield Token(gram, start + i, start + i + len(gram))
            yield Token(w, start, start + width)
            start += width

    def set_dictionary(self, dictionary_path):
        with self.lock:
            abs_path = _get_abs_path(dictionary_path)
            if not os.path.isfile(abs_path):
                raise IOError("zhcut: file does not exist: " + abs_path)
            self.dictionary = abs_path
            self.initialized = False


# default Tokenizer instance

dt = Tokenizer()

# global functions

get_FREQ = lambda k, d=None: dt.FREQ.get(k, d)
add_word = dt.add_word
calc = dt.calc
cut = dt.cut
lcut = dt.lcut
cut_for_search = dt.cut_for_search
lcut_for_search = dt.lcut_for_search
del_word = dt.del_word
get_DAG = dt.get_DAG
get_dict_file = dt.get_dict_file
initialize = dt.initialize
load_base_dictionary = dt.load_base_dictionary
load_userdict = dt.load_userdict
set_userdict = dt.set_userdict
reset = dt.reset
set_dictionary = dt.set_dictionary
suggest_freq = dt.suggest_freq
tokenize = dt.tokenize
