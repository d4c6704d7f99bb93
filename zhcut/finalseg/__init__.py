# -*- coding: utf-8 -*-
import re
import pickle
from .._compat import get_module_res, strdecode

MIN_FLOAT = -3.14e100

"""
載入HMM的參數
"""

PROB_START_P = "prob_start.p"
PROB_TRANS_P = "prob_trans.p"
PROB_EMIT_P = "prob_emit.p"

"""
B: begin詞的首字
M: middle詞的中間字
E：end詞的尾字
S：single單字成詞
PrevStatus表示一個狀態之前可能是哪些狀態
"""
PrevStatus = {
    'B': 'ES',
    'M': 'MB',
    'S': 'SE',
    'E': 'BM'
}


def load_model():
    with get_module_res("finalseg", PROB_START_P) as f:
        start_p = pickle.load(f)
    with get_module_res("finalseg", PROB_TRANS_P) as f:
        trans_p = pickle.load(f)
    with get_module_res("finalseg", PROB_EMIT_P) as f:
        emit_p = pickle.load(f)
    return start_p, trans_p, emit_p


"""
start_P:4個狀態的初始log機率，M及E為MIN_FLOAT(句首不可能是詞中或詞尾)
trans_P:4個狀態間的轉移log機率，只記錄合法的轉移
emit_P:在4個狀態下觀察到各個漢字的log機率，沒見過的字以MIN_FLOAT計
這三個表在import時載入一次，之後所有呼叫共用，不會被修改。
"""
start_P, trans_P, emit_P = load_model()


def viterbi(obs, states, start_p, trans_p, emit_p):
    """
    obs: 觀察序列
    states: 所有可能的狀態
    start_p: 一開始在每個不同狀態的機率
    trans_p: 轉移矩陣
    emit_p: 每個狀態發射出不同觀察值的機率矩陣

    回傳(prob, path)，path是與obs等長的狀態序列。
    """
    V = [{}]
    # mem_path[t][y]: 時刻t在狀態y時，時刻t-1最有可能在的狀態
    mem_path = [{}]
    for y in states:
        V[0][y] = start_p[y] + emit_p[y].get(obs[0], MIN_FLOAT)
        mem_path[0][y] = ''
    for t in range(1, len(obs)):
        V.append({})
        mem_path.append({})
        for y in states:
            em_p = emit_p[y].get(obs[t], MIN_FLOAT)
            (prob, state) = max(
                [(V[t - 1][y0] + trans_p[y0].get(y, MIN_FLOAT) + em_p, y0) for y0 in PrevStatus[y]])
            V[t][y] = prob
            mem_path[t][y] = state

    # 最後一個字只能是詞尾或單字詞
    (prob, state) = max((V[len(obs) - 1][y], y) for y in 'ES')

    path = [None] * len(obs)
    i = len(obs) - 1
    while i >= 0:
        path[i] = state
        state = mem_path[i][state]
        i -= 1
    return (prob, path)


def __cut(sentence):
    prob, pos_list = viterbi(sentence, 'BMES', start_P, trans_P, emit_P)
    begin, nexti = 0, 0
    for i, char in enumerate(sentence):
        pos = pos_list[i]
        if pos == 'B':
            begin = i
        elif pos == 'E':
            yield sentence[begin:i + 1]
            nexti = i + 1
        elif pos == 'S':
            yield char
            nexti = i + 1
    if nexti < len(sentence):
        yield sentence[nexti:]


re_han = re.compile(r"([\u3400-\u4DBF\u4E00-\u9FFF\uF900-\uFAFF]+)")
re_skip = re.compile(r"([a-zA-Z0-9]+(?:\.\d+)?%?)")


def cut(sentence, force_split=()):
    """
    Segment a run the dictionary could not explain with the HMM.

    Chinese blocks go through Viterbi decoding; other blocks are split into
    alphanumeric/number runs. Words listed in `force_split` (deleted from
    the lexicon) are broken back into characters.
    """
    sentence = strdecode(sentence)
    blocks = re_han.split(sentence)
    for blk in blocks:
        if not blk:
            continue
        if re_han.match(blk):
            for word in __cut(blk):
                if word not in force_split:
                    yield word
                else:
                    for c in word:
                        yield c
        else:
            tmp = re_skip.split(blk)
            for x in tmp:
                if x:
                    yield x
