import re
import pickle
import unicodedata
import zhcut
from .._compat import get_module_res, strdecode
from .. import CutMode, SEGMENT_MODES, resolve_mode
from .viterbi import viterbi

PROB_START_P = "prob_start.p"
PROB_TRANS_P = "prob_trans.p"
PROB_EMIT_P = "prob_emit.p"
CHAR_STATE_TAB_P = "char_state_tab.p"

#一個或多個漢字
re_han_detail = re.compile(r"^[\u3400-\u4DBF\u4E00-\u9FFF\uF900-\uFAFF]+$")
#半形或全形數字、小數點、百分號及中文數字
re_num = re.compile(
    r"^[0-9０-９\.．%％"
    r"零〇一二三四五六七八九"
    r"十百千万亿两]+$")
#英數字及+#&._%-
re_eng = re.compile(r"^[a-zA-Z0-9+#&\._%\-]+$")

"""
載入了HMM的參數
包括初始機率向量，狀態轉移機率矩陣，發射機率矩陣及CHAR_STATE_TAB_P這個字典(它記錄各個漢字可能的狀態及詞性)
"""
def load_model():
    with get_module_res("posseg", PROB_START_P) as f:
        start_p = pickle.load(f)
    with get_module_res("posseg", PROB_TRANS_P) as f:
        trans_p = pickle.load(f)
    with get_module_res("posseg", PROB_EMIT_P) as f:
        emit_p = pickle.load(f)
    with get_module_res("posseg", CHAR_STATE_TAB_P) as f:
        state = pickle.load(f)
    return state, start_p, trans_p, emit_p


char_state_tab_P, start_P, trans_P, emit_P = load_model()

"""
pair類別具有兩個屬性，分別是word及flag，它們代表詞彙本身及其詞性。
"""
class pair(object):

    def __init__(self, word, flag):
        self.word = word
        self.flag = flag

    def __repr__(self):
        return 'pair(%r, %r)' % (self.word, self.flag)

    def __str__(self):
        return '%s/%s' % (self.word, self.flag)

    def __iter__(self):
        return iter((self.word, self.flag))

    def __lt__(self, other):
        return self.word < other.word

    def __eq__(self, other):
        return isinstance(other, pair) and self.word == other.word and self.flag == other.flag

    def __hash__(self):
        return hash(self.word)

    def encode(self, arg):
        return str(self).encode(arg)


def is_symbol(word):
    """標點、符號、空白及控制字元(Unicode類別P, S, Z, C)"""
    return all(unicodedata.category(ch)[0] in 'PSZC' for ch in word)


"""
POSTokenizer借用zhcut.Tokenizer分詞，再依以下順序為每個詞決定詞性：
1. 詞典裡有記錄詞性的詞，使用該詞性
2. 全部由標點符號組成的詞，'x'
3. 數詞，'m'
4. 英數字，'eng'
5. 由HMM找出的漢字新詞，以詞性HMM解碼，取詞尾狀態的詞性
6. 其餘，'n'
"""
class POSTokenizer(object):

    def __init__(self, tokenizer=None):
        self.tokenizer = tokenizer or zhcut.Tokenizer()

    def __repr__(self):
        return '<POSTokenizer tokenizer=%r>' % self.tokenizer

    def __getattr__(self, name):
        if name in ('cut_for_search', 'lcut_for_search', 'tokenize'):
            # may be possible?
            raise NotImplementedError
        return getattr(self.tokenizer, name)

    def initialize(self, dictionary=None):
        self.tokenizer.initialize(dictionary)

    def __hmm_tag(self, word):
        prob, pos_list = viterbi(
            word, char_state_tab_P, start_P, trans_P, emit_P)
        return pos_list[-1][1]

    def tag_word(self, word, recognized, lexicon):
        if lexicon.is_word(word):
            flag = lexicon.tag(word)
            if flag:
                return flag
        if is_symbol(word):
            return 'x'
        if re_num.match(word):
            return 'm'
        if re_eng.match(word):
            return 'eng'
        if recognized and re_han_detail.match(word):
            return self.__hmm_tag(word)
        return 'n'

    def __cut_internal(self, sentence, mode, lexicon):
        for word, recognized in self.tokenizer._cut_recognized(sentence, mode, lexicon):
            yield pair(word, self.tag_word(word, recognized, lexicon))

    def cut(self, sentence, mode=CutMode.DEFAULT):
        """
        Segment `sentence` and yield pair(word, flag) for every word.

        mode is CutMode.DEFAULT or CutMode.HMM.
        """
        mode = resolve_mode(CutMode, mode, SEGMENT_MODES)
        self.tokenizer.check_initialized()
        return self.__cut_internal(strdecode(sentence), mode,
                                   self.tokenizer.lexicon.view)

    def lcut(self, *args, **kwargs):
        return list(self.cut(*args, **kwargs))

# default Tokenizer instance

dt = POSTokenizer(zhcut.dt)

# global functions

initialize = dt.initialize


def cut(sentence, mode=CutMode.DEFAULT):
    return dt.cut(sentence, mode)


def lcut(sentence, mode=CutMode.DEFAULT):
    return list(cut(sentence, mode))
