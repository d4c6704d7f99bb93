import sys
from operator import itemgetter
from collections import defaultdict
import zhcut.posseg
from .. import CutMode
from .tfidf import KeywordExtractor


class UndirectWeightedGraph(object):
    """
    無向加權圖，rank以加權PageRank為每個節點評分。
    """
    d = 0.85
    max_iter = 10
    tol = 1e-6

    def __init__(self):
        self.graph = defaultdict(list)

    def addNode(self, node):
        # 沒有任何邊的節點也要出現在結果中
        self.graph[node]

    def addEdge(self, start, end, weight):
        # use a tuple (start, end, weight) instead of a Edge object
        self.graph[start].append((start, end, weight))
        self.graph[end].append((end, start, weight))

    def rank(self):
        ws = {}
        outSum = defaultdict(float)

        # ws按節點加入的順序(即詞第一次出現的順序)排列
        wsdef = 1.0 / (len(self.graph) or 1.0)
        for n, out in self.graph.items():
            ws[n] = wsdef
            outSum[n] = sum((e[2] for e in out), 0.0)

        for x in range(self.max_iter):
            # 每一輪都只用上一輪的分數，位置相同的節點分數完全相等
            new_ws = {}
            delta = 0.0
            for n, out in self.graph.items():
                s = 0
                for e in out:
                    s += e[2] / outSum[e[1]] * ws[e[1]]
                w = (1 - self.d) + self.d * s
                delta = max(delta, abs(w - ws[n]))
                new_ws[n] = w
            ws = new_ws
            if delta < self.tol:
                break

        (min_rank, max_rank) = (sys.float_info[0], sys.float_info[3])

        for w in ws.values():
            if w < min_rank:
                min_rank = w
            if w > max_rank:
                max_rank = w

        for n, w in ws.items():
            # to unify the weights, don't *100.
            ws[n] = (w - min_rank / 10.0) / (max_rank - min_rank / 10.0)

        return ws


class TextRank(KeywordExtractor):

    def __init__(self):
        self.tokenizer = self.postokenizer = zhcut.posseg.dt
        self.stop_words = self.STOP_WORDS.copy()
        self.span = 5

    def pairfilter(self, wp, pos_filt):
        return ((not pos_filt or wp.flag in pos_filt)
                and self.is_candidate(wp.word))

    def textrank(self, sentence, topK=20, withWeight=True, allowPOS=('ns', 'n', 'vn', 'v'), withFlag=False):
        """
        Extract keywords from sentence using TextRank algorithm.
        Parameter:
            - topK: return how many top keywords. `None`, 0 or a negative
                    number for all possible words.
            - withWeight: if True, return a list of (word, weight);
                          if False, return a list of words.
            - allowPOS: the allowed POS list eg. ['ns', 'n', 'vn', 'v'].
                        if the POS of w is not in this list, it will be filtered.
                        An empty list keeps every word.
            - withFlag: if True, return a list of pair(word, weight) like posseg.cut
                        if False, return a list of words
        """
        pos_filt = frozenset(allowPOS)
        g = UndirectWeightedGraph()
        cm = defaultdict(int)
        words = [wp for wp in self.tokenizer.cut(sentence, CutMode.DEFAULT)
                 if self.pairfilter(wp, pos_filt)]
        key = (lambda wp: wp) if withFlag else (lambda wp: wp.word)
        for wp in words:
            g.addNode(key(wp))
        # 窗口在過濾後的詞序列上滑動
        for i, wp in enumerate(words):
            for j in range(i + 1, min(i + self.span, len(words))):
                if words[j].word == wp.word:
                    continue
                cm[(key(wp), key(words[j]))] += 1

        for terms, w in cm.items():
            g.addEdge(terms[0], terms[1], w)
        nodes_rank = g.rank()
        if withWeight:
            tags = sorted(nodes_rank.items(), key=itemgetter(1), reverse=True)
        else:
            tags = sorted(nodes_rank, key=nodes_rank.__getitem__, reverse=True)

        if topK and topK > 0:
            return tags[:topK]
        else:
            return tags

    extract_tags = textrank
