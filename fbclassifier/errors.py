# errors.py - exceptions raised by classifiers and count stores
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
"""Exceptions shared by the classifier and the count stores.

Every store mutation is all-or-nothing, so when one of these exceptions is
raised by a training operation the store is exactly as it was before the
call.

"""


class ClassifierError(Exception):
    """Base class for all errors raised by this package."""


class CategoryNotFound(ClassifierError, LookupError):
    """Raised when training, untraining or classification references a
    category that has not been registered with ``add_category()``.

    `category` is the name of the missing category.

    """

    def __init__(self, category):
        super().__init__('category {!r} does not exist'.format(category))
        self.category = category


class NegativeCount(ClassifierError, ValueError):
    """Raised when an operation would drive a document count or a token count
    below zero.

    This is also raised when removing a document would leave a token counted
    in more documents than the category holds, since the number of documents
    lacking that token would go negative.  Either way it indicates a logic
    error (removing a document that was never added) or corrupted counts.

    """


class TokenizationFailure(ClassifierError, ValueError):
    """Raised by a tokenizer that cannot turn its input into tokens."""
