import os
import logging
import zhcut
import zhcut.posseg
from operator import itemgetter
from .. import CutMode

#代碼與_compat.py裡的get_module_res類似
#但get_module_res是回傳一個開啟的檔案
#_get_module_path則是回傳檔案的路徑
_get_module_path = lambda path: os.path.normpath(os.path.join(os.getcwd(),
                                                 os.path.dirname(__file__), path))
_get_abs_path = zhcut._get_abs_path

DEFAULT_IDF = _get_module_path("idf.txt")

default_logger = logging.getLogger(__name__)


class KeywordExtractor(object):

    #停用詞
    STOP_WORDS = set((
        "the", "of", "is", "and", "to", "in", "that", "we", "for", "an", "are",
        "by", "be", "as", "on", "with", "can", "if", "from", "which", "you", "it",
        "this", "then", "at", "have", "all", "not", "one", "has", "or", "that"
    ))

    #自定義停用詞，將stop_words_path裡的資料更新至self.stop_words
    def set_stop_words(self, stop_words_path):
        abs_path = _get_abs_path(stop_words_path)
        if not os.path.isfile(abs_path):
            raise IOError("zhcut: file does not exist: " + abs_path)
        with open(abs_path, 'rb') as f:
            content = f.read().decode('utf-8')
        for line in content.splitlines():
            line = line.strip()
            if line:
                self.stop_words.add(line)

    def is_candidate(self, word):
        #略過長度小於2的詞及停用詞
        return len(word.strip()) >= 2 and word.lower() not in self.stop_words

    def extract_tags(self, *args, **kwargs):
        raise NotImplementedError


class IDFLoader(object):

    def __init__(self, idf_path=None):
        self.path = ""
        #idf_freq是一個字典，記錄各詞的IDF
        self.idf_freq = {}
        #所有IDF的中位數，沒有記錄在idf_freq裡的詞以它計算
        self.median_idf = 0.0
        if idf_path:
            self.set_new_path(idf_path)

    def set_new_path(self, new_idf_path):
        if self.path != new_idf_path:
            self.path = new_idf_path
            with open(new_idf_path, 'rb') as f:
                content = f.read().decode('utf-8')
            self.idf_freq = {}
            for lineno, line in enumerate(content.splitlines(), 1):
                if not line.strip():
                    continue
                try:
                    word, freq = line.strip().split(' ')
                    self.idf_freq[word] = float(freq)
                except ValueError:
                    default_logger.warning(
                        'invalid IDF entry in %s at Line %s: %r', new_idf_path, lineno, line)
            #取list的中位數
            if self.idf_freq:
                self.median_idf = sorted(
                    self.idf_freq.values())[len(self.idf_freq) // 2]
            else:
                self.median_idf = 0.0

    def get_idf(self):
        return self.idf_freq, self.median_idf

"""
參考維基百科中的tf-idf頁面：
TF代表的是term frequency，即文檔中各詞彙出現的頻率。
IDF代表的是inverse document frequency，代表詞彙在各文檔出現頻率倒數的對數值。
而TF-IDF值則是上述兩項的乘積。
"""
class TFIDF(KeywordExtractor):

    def __init__(self, idf_path=None):
        self.tokenizer = zhcut.dt
        self.postokenizer = zhcut.posseg.dt
        self.stop_words = self.STOP_WORDS.copy()
        self.idf_loader = IDFLoader(idf_path or DEFAULT_IDF)
        self.idf_freq, self.median_idf = self.idf_loader.get_idf()

    def set_idf_path(self, idf_path):
        new_abs_path = _get_abs_path(idf_path)
        if not os.path.isfile(new_abs_path):
            raise IOError("zhcut: file does not exist: " + new_abs_path)
        self.idf_loader.set_new_path(new_abs_path)
        self.idf_freq, self.median_idf = self.idf_loader.get_idf()

    def extract_tags(self, sentence, topK=20, withWeight=True, allowPOS=(), withFlag=False):
        """
        Extract keywords from sentence using TF-IDF algorithm.
        Parameter:
            - topK: return how many top keywords. `None`, 0 or a negative
                    number for all possible words.
            - withWeight: if True, return a list of (word, weight);
                          if False, return a list of words.
            - allowPOS: the allowed POS list eg. ['ns', 'n', 'vn', 'v','nr'].
                        if the POS of w is not in this list,it will be filtered.
            - withFlag: only work with allowPOS is not empty.
                        if True, return a list of pair(word, weight) like posseg.cut
                        if False, return a list of words
        """
        if allowPOS:
            allowPOS = frozenset(allowPOS)
            # words為generator of pair
            words = self.postokenizer.cut(sentence, CutMode.DEFAULT)
        else:
            # words為generator of str
            words = self.tokenizer.cut(sentence, CutMode.DEFAULT)
        # 計算詞頻(即TF，term frequency)，字典保留各詞第一次出現的順序
        freq = {}
        for w in words:
            if allowPOS:
                if w.flag not in allowPOS:
                    continue
                elif not withFlag:
                    w = w.word
            wc = w.word if allowPOS and withFlag else w
            if not self.is_candidate(wc):
                continue
            freq[w] = freq.get(w, 0.0) + 1.0
        total = sum(freq.values())
        for k in freq:
            kw = k.word if allowPOS and withFlag else k
            # 如果idf_freq字典中未記錄該詞，則以idf的中位數替代
            freq[k] *= self.idf_freq.get(kw, self.median_idf) / total

        # sorted是穩定的，分數相同時維持第一次出現的順序
        if withWeight:
            tags = sorted(freq.items(), key=itemgetter(1), reverse=True)
        else:
            tags = sorted(freq, key=freq.__getitem__, reverse=True)
        if topK and topK > 0:
            return tags[:topK]
        else:
            return tags
