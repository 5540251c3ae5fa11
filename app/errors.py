# app/errors.py


class TypesnippetError(Exception):
    """Base class for errors raised by the app outside the key-handling core."""


class TextLoadError(TypesnippetError):
    pass


class SettingsError(TypesnippetError):
    pass
