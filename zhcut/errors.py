# -*- coding: utf-8 -*-


class ZhcutError(Exception):
    """Base class of the errors raised by zhcut."""


class NotInitializedError(ZhcutError, RuntimeError):
    """A lexicon operation was called before any base dictionary was loaded."""


class InvalidModeError(ZhcutError, ValueError):
    """An unknown or unsupported cut/tokenize mode was requested."""
