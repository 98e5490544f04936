# memory.py - the reference count store, held in memory
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
import logging
import threading

from fbclassifier.errors import CategoryNotFound
from fbclassifier.errors import NegativeCount
from fbclassifier.stores.base import Store
from fbclassifier.stores.base import unique_tokens

PICKLE_VERSION = 1


class CategoryInfo:
    """Represents the number of documents trained in a category, and the
    number of those documents in which each token appears.

    Tokens whose count drops back to zero are removed from `tokencounts`, so
    its size is the number of distinct tokens that appear in the category.

    """

    __slots__ = 'documentcount', 'tokencounts'

    def __init__(self, documentcount=0, tokencounts=None):
        self.__setstate__((documentcount, tokencounts or {}))

    def __repr__(self):
        return 'CategoryInfo({!r}, <{} tokens>)'.format(self.documentcount,
                                                       len(self.tokencounts))

    def __getstate__(self):
        return self.documentcount, self.tokencounts

    def __setstate__(self, t):
        self.documentcount, self.tokencounts = t


class MemoryStore(Store):
    """A store that keeps every count in a dictionary.

    A single reentrant lock serializes all writers and readers, so every
    read is a consistent snapshot.  Writes check all of their preconditions
    before changing anything.

    """

    # allow a subclass to use a different class for CategoryInfo
    CategoryInfoClass = CategoryInfo

    def __init__(self):
        self.lock = threading.RLock()
        # This maps category name to CategoryInfo record, in order of
        # registration.
        self.categoryinfo = {}

    def __getstate__(self):
        with self.lock:
            state = {name: (info.documentcount, dict(info.tokencounts))
                     for name, info in self.categoryinfo.items()}
        return PICKLE_VERSION, state

    def __setstate__(self, t):
        if t[0] != PICKLE_VERSION:
            raise ValueError("Can't unpickle: version {} unknown".format(t[0]))
        self.lock = threading.RLock()
        self.categoryinfo = {name: self.CategoryInfoClass(*counts)
                             for name, counts in t[1].items()}

    def _info(self, category):
        try:
            return self.categoryinfo[category]
        except KeyError:
            raise CategoryNotFound(category) from None

    def add_category(self, name):
        with self.lock:
            if name in self.categoryinfo:
                return
            self.categoryinfo[name] = self.CategoryInfoClass()
            logging.debug('Registered category %r', name)
        self._post_training()

    def add_document(self, category, tokens):
        tokens = unique_tokens(tokens)
        with self.lock:
            record = self._info(category)
            record.documentcount += 1
            counts = record.tokencounts
            for token in tokens:
                counts[token] = counts.get(token, 0) + 1
        self._post_training()

    def remove_document(self, category, tokens):
        tokens = unique_tokens(tokens)
        with self.lock:
            record = self._info(category)
            documentcount = record.documentcount - 1
            if documentcount < 0:
                logging.debug('Refusing to remove a document from empty'
                              ' category %r', category)
                raise NegativeCount('document count of {!r} would go'
                                    ' negative'.format(category))
            counts = record.tokencounts
            # Compute every new count first, so that nothing is changed
            # unless the whole removal is valid.
            changed = {}
            for token in tokens:
                count = counts.get(token, 0) - 1
                if count < 0:
                    logging.debug('Refusing to remove %r from category %r',
                                  token, category)
                    raise NegativeCount('count of token {!r} in {!r} would go'
                                        ' negative'.format(token, category))
                changed[token] = count
            unchanged = (n for token, n in counts.items()
                         if token not in changed)
            if max(unchanged, default=0) > documentcount:
                raise NegativeCount('a token of {!r} would be counted in more'
                                    ' documents than the category'
                                    ' holds'.format(category))
            record.documentcount = documentcount
            for token, count in changed.items():
                if count == 0:
                    del counts[token]
                else:
                    counts[token] = count
        self._post_training()

    def _post_training(self):
        """This is called after every successful change to the counts.
        Subclasses might want to ensure that their databases are in a
        consistent state at this point.

        """
        pass

    def categories(self):
        with self.lock:
            return {name: info.documentcount
                    for name, info in self.categoryinfo.items()}

    def token_counts(self, categories, tokens):
        tokens = list(tokens)
        with self.lock:
            if categories is None:
                categories = list(self.categoryinfo)
            result = {}
            for category in categories:
                counts = self._info(category).tokencounts
                result[category] = {token: counts.get(token, 0)
                                    for token in tokens}
            return result

    def snapshot(self, tokens, categories=None):
        with self.lock:
            return (self.categories(),
                    self.token_counts(categories, tokens))
