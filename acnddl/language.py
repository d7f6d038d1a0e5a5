# Copyright 2021-2024 Nokia

from typing import List, Optional

from .errors import *
from .errors import make_exception
from .identifier import verify_ncname
from .node import IdentifiedLeafNode, LabeledElement, Module, ModuleKind

__all__ = ("LanguageSet", "Language", "String", )


class LanguageSet(Module):
    """A DDL ``languageset`` module with the label strings of other modules."""
    TAG = "languageset"
    kind = ModuleKind.languageset
    CHILD_FIELDS = Module.CHILD_FIELDS + ("languages", )

    def __init__(self, id=None, label=None, provider=None, uuid=None):
        super().__init__(id, uuid, label, provider)
        self.languages: List[Language] = []

    def add_language(self, lang: str, altlang: Optional[str] = None, label: Optional[str] = None) -> "Language":
        """Add a language.

        :param lang: the RFC 3066 language code
        :param altlang: a language of this set to fall back to, if any
        :raises DdlIntegrityError: ``lang`` is present already, or ``altlang``
            is given and not present
        """
        if self.get_language(lang) is not None:
            raise make_exception(ddl_err_language_present, lang=lang, id=self.id)
        if altlang and self.get_language(altlang) is None:
            raise make_exception(ddl_err_altlang_missing, altlang=altlang, id=self.id)
        result = Language(lang, altlang, label)
        self._add_child_node("languages", result)
        return result

    def get_language(self, lang: Optional[str]) -> "Optional[Language]":
        """Get a language, the first one when ``lang`` is empty."""
        if not self.languages:
            return None
        if not lang:
            return self.languages[0]
        for language in self.languages:
            if language.lang == lang:
                return language
        return None

    def get_string(self, key: str, lang: Optional[str] = None) -> "Optional[String]":
        """Get a string, following the ``altlang`` chain of the language."""
        language = self.get_language(lang)
        seen = []
        while language is not None and language not in seen:
            result = language.get_string(key)
            if result is not None:
                return result
            seen.append(language)
            language = self.get_language(language.altlang) if language.altlang else None
        return None

    def get_string_text(self, key: str, lang: Optional[str] = None) -> Optional[str]:
        result = self.get_string(key, lang)
        return result.value if result is not None else None


class Language(LabeledElement):
    TAG = "language"
    CHILD_FIELDS = LabeledElement.CHILD_FIELDS + ("strings", )

    def __init__(self, lang: str, altlang: Optional[str] = None, label: Optional[str] = None,
                 id: Optional[str] = None):
        super().__init__(id, label)
        self.lang = lang
        self.altlang = altlang
        self.strings: List[String] = []

    def add_string(self, key: str, value: str) -> "String":
        if self.get_string(key) is not None:
            raise make_exception(ddl_err_string_present, key=key, lang=self.lang)
        result = String(key, value)
        self._add_child_node("strings", result)
        return result

    def get_string(self, key: str) -> "Optional[String]":
        for string in self.strings:
            if string.key == key:
                return string
        return None

    def __repr__(self):
        return f"Language({self.lang!r})"


class String(IdentifiedLeafNode):
    """A language specific text, identified by its key in the language set."""
    TAG = "string"

    def __init__(self, key: str, value: Optional[str] = None, id: Optional[str] = None):
        super().__init__(id, value)
        self.key = verify_ncname(key, "string key")
