# -*- coding: utf-8 -*-
"""
有向無環圖(DAG)的建構與最大機率路徑搜尋。

這兩個函數原本是Tokenizer的方法，抽出來之後，Lexicon在計算suggest_freq時
也能使用同一套評分方式，確保建議的詞頻與cut的結果一致。

兩個函數都接受一個LexiconView(詞典的唯讀快照)而不是詞典本身，
同一次呼叫從頭到尾只會看到同一個版本的詞典。
"""
from math import log
from operator import itemgetter


def get_DAG(sentence, lexicon):
    """
    將句子表示成一個有向無環圖。

    DAG是一個把詞首索引對應到list的字典，list裡的每個元素是可以與該詞首成詞的
    詞尾索引(包含詞尾本身)，由小到大排列。不論sentence[k]本身是否在詞典裡，
    k這個單字詞尾一定會出現在DAG[k]中，所以任何位置都不會是死路。
    """
    get = lexicon.get
    DAG = {}
    N = len(sentence)
    for k in range(N):
        tmplist = []
        i = k
        frag = sentence[k]
        # 詞典裡所有詞的前綴都以詞頻0的形式存在，所以可以一路往後走到前綴不存在為止
        while i < N:
            freq = get(frag)
            if freq is None:
                break
            if freq:
                tmplist.append(i)
            i += 1
            frag = sentence[k:i + 1]
        if not tmplist or tmplist[0] != k:
            tmplist.insert(0, k)
        DAG[k] = tmplist
    return DAG


def calc(sentence, DAG, route, lexicon):
    """
    由後往前填充route。

    route[idx]是一個tuple：第一個元素是sentence[idx:]最大切分組合的機率對數，
    第二個元素是該組合中包含sentence[idx]的詞的詞尾索引。
    詞典裡沒有的單字以詞典中最小的詞頻(lexicon.min_freq)計分。
    機率相同時選詞尾較小者，DAG[idx]由小到大排列而max會回傳第一個最大值。
    """
    N = len(sentence)
    route[N] = (0, 0)
    logtotal = log(lexicon.total or 1)
    floor = lexicon.min_freq
    get = lexicon.get
    for idx in range(N - 1, -1, -1):
        route[idx] = max(((log(get(sentence[idx:x + 1]) or floor) -
                           logtotal + route[x + 1][0], x) for x in DAG[idx]),
                         key=itemgetter(0))


def cut_route(sentence, lexicon):
    """Dictionary-only segmentation of `sentence` along the best route."""
    DAG = get_DAG(sentence, lexicon)
    route = {}
    calc(sentence, DAG, route, lexicon)
    words = []
    x = 0
    N = len(sentence)
    while x < N:
        y = route[x][1] + 1
        words.append(sentence[x:y])
        x = y
    return words
