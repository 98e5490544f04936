# base.py - the interface between classifiers and their token counts
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
"""Count store framework.

Classes:
    Store - abstract interface for the counts a classifier learns from

Abstract:
    A store keeps, for each registered category, the number of documents
    trained in that category, and for each token the number of those
    documents that contained it.  Counts are document frequencies: a
    document contributes at most one to any token's count, so stores
    deduplicate the tokens they are given.

    Implementations must guarantee that

    o adding or removing a document is atomic: either the document count
      and every token count change, or nothing changes;
    o no count ever goes below zero, and no token is counted in more
      documents than its category holds;
    o a read concurrent with a write sees either the state before the write
      or the state after it, never part of it.

"""
import abc


def unique_tokens(tokens):
    """Returns the distinct elements of `tokens` as a list, in the order in
    which each first appears.

    """
    return list(dict.fromkeys(tokens))


class Store(metaclass=abc.ABCMeta):
    """The counts that a :class:`~fbclassifier.classifiers.Classifier`
    computes its probabilities from.

    """

    @abc.abstractmethod
    def add_category(self, name):
        """Registers a category named `name` with no documents.

        Registering a category that already exists does nothing.

        """

    @abc.abstractmethod
    def add_document(self, category, tokens):
        """Counts one more document in `category`, containing each token in
        the iterable `tokens`.

        Raises :exc:`~fbclassifier.errors.CategoryNotFound` if `category` has
        not been registered.

        """

    @abc.abstractmethod
    def remove_document(self, category, tokens):
        """Reverses a previous call to :meth:`add_document` with the same
        arguments.

        Raises :exc:`~fbclassifier.errors.NegativeCount` if any count would go
        negative, in which case the store is left unchanged.

        """

    @abc.abstractmethod
    def categories(self):
        """Returns a dictionary mapping each registered category to its
        document count.

        """

    @abc.abstractmethod
    def token_counts(self, categories, tokens):
        """Returns a dictionary mapping each category name to a dictionary
        mapping each token to the number of documents in the category that
        contain it.

        If `categories` is ``None`` every registered category is included.
        Tokens that were never seen have a count of zero.

        """

    def snapshot(self, tokens, categories=None):
        """Returns the pair ``(categories(), token_counts(categories,
        tokens))``.

        Subclasses should override this to read both from the same
        consistent state.

        """
        return self.categories(), self.token_counts(categories, tokens)

    def close(self):
        pass
