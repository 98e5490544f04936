# tokenizer.py - splits documents into sets of normalized words
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
"""Module to tokenize plain text documents for classification.

Any object with a ``tokenize(text)`` method returning a list of distinct
strings can be given to a classifier in place of :class:`Tokenizer`.

"""
from fbclassifier.errors import TokenizationFailure

#: Words shorter than this are skipped.  Very short words ("is", "a", "of")
#: appear in nearly every document and carry no signal.
MIN_WORD_SIZE = 3

#: If not ``None``, words longer than this are skipped as well.
MAX_WORD_SIZE = None


class Tokenizer:
    """Splits text on whitespace into lowercase words.

    Words shorter than `min_length` characters (and, when `max_length` is
    not ``None``, longer than `max_length`) are dropped.  The result contains
    each remaining word once, in the order of its first appearance.

    """

    def __init__(self, min_length=MIN_WORD_SIZE, max_length=MAX_WORD_SIZE):
        self.min_length = min_length
        self.max_length = max_length

    def tokenize(self, text):
        """Returns the list of distinct normalized words in `text`.

        `text` may be a string or UTF-8 encoded bytes; anything else raises
        :exc:`TokenizationFailure`.

        """
        if isinstance(text, (bytes, bytearray)):
            try:
                text = text.decode('utf-8')
            except UnicodeDecodeError as exception:
                raise TokenizationFailure(str(exception)) from exception
        if not isinstance(text, str):
            msg = 'cannot tokenize object of type {}'
            raise TokenizationFailure(msg.format(type(text).__name__))
        # dict preserves insertion order, which makes this an ordered set.
        words = {}
        for word in text.lower().split():
            if len(word) < self.min_length:
                continue
            if self.max_length is not None and len(word) > self.max_length:
                continue
            words[word] = None
        return list(words)


global_tokenizer = Tokenizer()
tokenize = global_tokenizer.tokenize
