# -*- coding: utf-8 -*-
"""
詞典(Lexicon)

詞典分成兩層：
- base: 由基礎字典檔建立的前綴字典，載入後就不再改動。
- overlay: 執行期間由add_word/del_word/load_userdict加入的詞，reset時整層丟棄。

所有讀取操作都透過LexiconView進行。LexiconView是某一時刻詞典的唯讀快照，
寫入時會在self.lock之下建立新的overlay，最後以一次賦值替換self._view，
因此正在分詞的呼叫只會看到修改前或修改後的詞典，不會看到修改到一半的狀態。
"""
import logging
import re
import threading

from ._compat import open_resource, strdecode, string_types
from .dag import cut_route
from .errors import NotInitializedError

default_logger = logging.getLogger(__name__)

re_tag = re.compile('^[a-zA-Z]+$', re.U)


def read_entries(f):
    """
    讀取 `word [freq] [tag]` 格式的字典內容。

    回傳(entries, skipped)：entries是(word, freq, tag)的list，
    freq及tag沒有給出時為None；skipped是無法解析而被略過的行數。
    """
    lines, f_name, owned = open_resource(f)
    entries = []
    skipped = 0
    try:
        for lineno, ln in enumerate(lines, 1):
            line = ln
            try:
                if not isinstance(line, string_types):
                    line = line.decode('utf-8')
                line = line.strip()
                if lineno == 1:
                    line = line.lstrip('\ufeff')
                if not line:
                    continue
                parts = line.split()
                if len(parts) > 3:
                    raise ValueError('too many fields')
                word, freq, tag = parts[0], None, None
                if len(parts) == 2 and re_tag.match(parts[1]):
                    tag = parts[1]
                elif len(parts) > 1:
                    freq = int(parts[1])
                    if freq < 0:
                        raise ValueError('negative frequency')
                    if len(parts) == 3:
                        tag = parts[2]
            except ValueError:
                # UnicodeDecodeError也是ValueError的子類別
                skipped += 1
                default_logger.warning(
                    'invalid dictionary entry in %s at Line %s: %r', f_name, lineno, ln)
                continue
            entries.append((word, freq, tag))
    finally:
        if owned:
            lines.close()
    return entries, skipped


def gen_pfdict(entries):
    """
    由(word, freq, tag)建立前綴字典。

    回傳(lfreq, ltotal, ltags)。每個詞的所有前綴都會以詞頻0加入lfreq，
    get_DAG就是靠這些前綴判斷是否該繼續往後找。
    基礎字典裡沒有詞頻的詞以1計。
    """
    lfreq = {}
    ltags = {}
    ltotal = 0
    for word, freq, tag in entries:
        freq = 1 if freq is None else freq
        ltotal += freq - (lfreq.get(word) or 0)
        lfreq[word] = freq
        if tag:
            ltags[word] = tag
        for ch in range(len(word)):
            wfrag = word[:ch + 1]
            if wfrag not in lfreq:
                lfreq[wfrag] = 0
    return lfreq, ltotal, ltags


def suggest(lexicon, segment):
    """
    在lexicon這個快照上計算segment的建議詞頻，不會修改詞典。

    segment是字串時，回傳能讓它被切成一個詞的最小詞頻；
    segment是tuple時，回傳能讓它被切成這些片段的最大詞頻。
    以整數運算求 Π f(si) / T^(k-1)，避免浮點誤差造成差一。
    詞典裡沒有的片段和calc一樣以lexicon.min_freq計分。
    """
    ftotal = lexicon.total or 1
    floor = lexicon.min_freq
    if isinstance(segment, string_types):
        word = segment
        segs = cut_route(word, lexicon)
        numer = 1
        for seg in segs:
            numer *= lexicon.get(seg) or floor
        return max(numer // ftotal ** (len(segs) - 1) + 1, lexicon.get(word) or 1)
    word = ''.join(segment)
    numer = 1
    for seg in segment:
        numer *= lexicon.get(seg) or floor
    return min(numer // ftotal ** (len(segment) - 1), lexicon.get(word) or 0)


class LexiconView(object):
    """
    A read-only snapshot of a Lexicon.

    Behaves like a prefix dict: ``get(word)`` returns the
    frequency of a word, 0 for a bare prefix, None when the string is not
    even a prefix of an entry.
    """

    __slots__ = ('base', 'base_tags', 'overlay', 'tags', 'total', 'min_freq',
                 'force_split', 'get')

    def __init__(self, base, base_tags, total, min_freq, overlay=None,
                 tags=None, force_split=frozenset()):
        self.base = base
        self.base_tags = base_tags
        self.overlay = overlay or {}
        self.tags = tags or {}
        self.total = total
        self.min_freq = min_freq
        self.force_split = force_split
        if self.overlay:
            self.get = self._get_layered
        else:
            self.get = base.get

    def _get_layered(self, word, default=None):
        freq = self.overlay.get(word)
        if freq is None:
            return self.base.get(word, default)
        return freq

    def __contains__(self, word):
        return self.get(word) is not None

    def __getitem__(self, word):
        freq = self.get(word)
        if freq is None:
            raise KeyError(word)
        return freq

    def __repr__(self):
        return '<LexiconView total=%d overlay=%d>' % (self.total, len(self.overlay))

    def is_word(self, word):
        return bool(self.get(word))

    def tag(self, word):
        tag = self.tags.get(word)
        if tag is None:
            tag = self.base_tags.get(word)
        return tag


class _OverlayBuilder(object):
    """Working copy of an overlay; published once as a new LexiconView."""

    def __init__(self, view, fresh=False):
        self.view = view
        self.overlay = {} if fresh else dict(view.overlay)
        self.tags = {} if fresh else dict(view.tags)
        self.force_split = set() if fresh else set(view.force_split)
        self.total = view.total
        self.min_freq = view.min_freq

    def get(self, word, default=None):
        freq = self.overlay.get(word)
        if freq is None:
            return self.view.base.get(word, default)
        return freq

    def put(self, word, freq, tag=None):
        self.total += freq - (self.get(word) or 0)
        self.overlay[word] = freq
        if tag:
            self.tags[word] = tag
        for ch in range(len(word)):
            wfrag = word[:ch + 1]
            if self.get(wfrag) is None:
                self.overlay[wfrag] = 0
        if freq:
            self.min_freq = min(self.min_freq, freq)
            self.force_split.discard(word)
        else:
            self.force_split.add(word)

    def build(self):
        return LexiconView(self.view.base, self.view.base_tags, self.total,
                           self.min_freq, self.overlay, self.tags,
                           frozenset(self.force_split))


class Lexicon(object):
    """
    Word -> (frequency, tag) dictionary with a resettable session overlay.

    Every operation except ``load``/``restore`` raises NotInitializedError
    until a base dictionary has been loaded.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self.base_freq = None
        self.base_tags = None
        self.base_total = 0
        self.base_min_freq = 1
        self._view = None

    def __repr__(self):
        return '<Lexicon initialized=%r>' % self.initialized

    @property
    def initialized(self):
        return self._view is not None

    @property
    def view(self):
        return self.check_initialized()

    def check_initialized(self):
        view = self._view
        if view is None:
            raise NotInitializedError(
                'zhcut: lexicon is not initialized, load a base dictionary first')
        return view

    def _base_view(self):
        return LexiconView(self.base_freq, self.base_tags, self.base_total,
                           self.base_min_freq)

    def load(self, f):
        """
        Replace the base dictionary with the content of `f` and drop the
        session overlay.
        """
        entries, skipped = read_entries(f)
        lfreq, ltotal, ltags = gen_pfdict(entries)
        self.restore(lfreq, ltotal, ltags)
        default_logger.debug(
            'Base dictionary loaded: %d entries, %d lines skipped', len(entries), skipped)

    def restore(self, lfreq, ltotal, ltags):
        """Install an already built prefix dict as the base layer."""
        min_freq = min((freq for freq in lfreq.values() if freq), default=1)
        with self.lock:
            self.base_freq = lfreq
            self.base_tags = ltags
            self.base_total = ltotal
            self.base_min_freq = min_freq
            self._view = self._base_view()

    def reset(self):
        """Discard every session mutation and go back to the base dictionary."""
        with self.lock:
            self.check_initialized()
            self._view = self._base_view()

    def _apply(self, entries, fresh=False):
        with self.lock:
            view = self.check_initialized()
            builder = _OverlayBuilder(self._base_view() if fresh else view, fresh)
            for word, freq, tag in entries:
                if freq is None or freq < 0:
                    freq = suggest(builder.build(), word)
                builder.put(word, int(freq), tag)
            self._view = builder.build()

    def merge(self, f):
        """
        Add the entries of `f` on top of the current state.

        Returns a status message with the number of merged entries and of
        skipped malformed lines.
        """
        self.check_initialized()
        entries, skipped = read_entries(f)
        self._apply(entries)
        return 'Ok: %d entries merged, %d lines skipped' % (len(entries), skipped)

    def set_overlay(self, f):
        """Replace the whole session overlay with the entries of `f`."""
        self.check_initialized()
        entries, skipped = read_entries(f)
        self._apply(entries, fresh=True)
        return 'Ok: %d entries merged, %d lines skipped' % (len(entries), skipped)

    def add_word(self, word, freq=None, tag=None):
        """
        Add a word to the overlay.

        freq and tag can be omitted, freq defaults to be a calculated value
        that ensures the word can be cut out.
        """
        word = strdecode(word)
        if not word:
            raise ValueError('zhcut: cannot add an empty word')
        if freq is not None:
            freq = int(freq)
        self._apply([(word, freq, tag)])

    def del_word(self, word):
        """Convenient function for deleting a word."""
        self.add_word(word, 0)

    def suggest_freq(self, segment, tune=False):
        """
        Suggest word frequency to force the characters in a word to be
        joined or splitted.

        Parameter:
            - segment : The segments that the word is expected to be cut into,
                        If the word should be treated as a whole, use a str.
            - tune : If True, tune the word frequency.
        """
        if isinstance(segment, (str, bytes)):
            segment = strdecode(segment)
            word = segment
        else:
            segment = tuple(map(strdecode, segment))
            word = ''.join(segment)
        if not word:
            raise ValueError('zhcut: cannot suggest a frequency for an empty word')
        with self.lock:
            freq = suggest(self.view, segment)
            if tune:
                self.add_word(word, freq)
        return freq
