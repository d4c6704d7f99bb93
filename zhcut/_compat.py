# -*- coding: utf-8 -*-
# _compat.py裡定義了讀取資源檔及解碼輸入時會用到的函數
import io
import os

"""
get_module_res:
以本模組所在的目錄為基準，開啟套件內附的資源檔(字典、HMM參數、IDF表)後回傳檔案物件。
"""
get_module_res = lambda *res: open(os.path.normpath(os.path.join(
                        os.getcwd(), os.path.dirname(__file__), *res)), 'rb')

text_type = str
string_types = (str,)


def strdecode(sentence):
    """
    確保sentence是字串型別後回傳：bytes先以utf-8解碼，失敗時改以gbk解碼。
    """
    if not isinstance(sentence, text_type):
        try:
            sentence = sentence.decode('utf-8')
        except UnicodeDecodeError:
            sentence = sentence.decode('gbk', 'ignore')
    return sentence


def resolve_filename(f):
    try:
        return f.name
    except AttributeError:
        return repr(f)


def open_resource(f):
    """
    Normalize a dictionary-like resource into an iterable of lines.

    `f` may be a path, an open file object, raw bytes content, or any
    iterable of lines. Returns ``(lines, name, owned)``; when `owned` is
    True the caller is responsible for closing `lines`.
    """
    if isinstance(f, string_types):
        return open(f, 'rb'), f, True
    if isinstance(f, (bytes, bytearray)):
        return io.BytesIO(bytes(f)), '<bytes>', True
    return f, resolve_filename(f), False
