MIN_FLOAT = -3.14e100
MIN_INF = float("-inf")


def viterbi(obs, states, start_p, trans_p, emit_p):
    """
    請參考李航書中的算法10.5(維特比算法)

    HMM共有五個參數，分別是觀察值集合(句子本身, obs)，
    狀態值集合(all_states, 即trans_p.keys())，
    初始機率(start_p)，狀態轉移機率矩陣(trans_p)，發射機率矩陣(emit_p)

    此處的states是為char_state_tab_P，
    這是一個用來查詢漢字可能狀態的字典。
    所謂"狀態"是分詞標籤(BMES)及詞性(v, n, nr, d, ...)的組合，例如('B', 'n')。

    回傳(prob, route)，route是與obs等長的狀態序列。
    """
    V = [{}]  # tabular
    # mem_path[t][y]: 時刻t在狀態y時，時刻t-1最有可能在的狀態
    mem_path = [{}]
    all_states = trans_p.keys()
    for y in states.get(obs[0], all_states):  # init
        V[0][y] = start_p[y] + emit_p[y].get(obs[0], MIN_FLOAT)
        mem_path[0][y] = ''

    for t in range(1, len(obs)):
        V.append({})
        mem_path.append({})
        prev_states = [
            x for x in mem_path[t - 1].keys() if len(trans_p[x]) > 0]

        # 由前一個字推斷當前的字可能在什麼狀態，再與該字本身可能的狀態取交集
        prev_states_expect_next = set(
            (y for x in prev_states for y in trans_p[x].keys()))
        obs_states = set(
            states.get(obs[t], all_states)) & prev_states_expect_next

        if not obs_states:
            obs_states = prev_states_expect_next if prev_states_expect_next else all_states

        for y in obs_states:
            prob, state = max((V[t - 1][y0] + trans_p[y0].get(y, MIN_INF) +
                               emit_p[y].get(obs[t], MIN_FLOAT), y0) for y0 in prev_states)
            V[t][y] = prob
            mem_path[t][y] = state

    # obs是一個完整的詞，所以末字只能是詞尾或單字詞；沒有這樣的狀態時才放寬
    last = [(V[-1][y], y) for y in mem_path[-1].keys() if y[0] in 'ES']
    if not last:
        last = [(V[-1][y], y) for y in mem_path[-1].keys()]
    prob, state = max(last)

    route = [None] * len(obs)
    i = len(obs) - 1
    while i >= 0:
        route[i] = state
        state = mem_path[i][state]
        i -= 1
    return (prob, route)
