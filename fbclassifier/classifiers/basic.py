# basic.py - a Bayesian classifier for documents in many categories
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
"""An implementation of a Bayes-like classifier for any number of
categories.

This code implements Gary Robinson's suggestions, the core of which are
well explained on his webpage:

   http://radio.weblogs.com/0101454/stories/2002/09/16/spamDetection.html

Each category is treated as an independent hypothesis, not as one part of a
partition: for every category, each token of a document gets the probability
that a document containing it belongs to the category, the tokens farthest
from 0.5 are kept, and those are combined with Fisher's chi-squared method
into a probability for the category.  The probabilities of different
categories need not sum to one; callers wanting a single answer should pick
the highest.

This implementation is due to Tim Peters et alia, generalized from spam and
ham to arbitrary categories.

"""
import logging

from blinker import signal

from fbclassifier.chi2 import fisher_combine
from fbclassifier.classifiers.constants import MAX_DISCRIMINATORS
from fbclassifier.classifiers.constants import MINIMUM_PROB_STRENGTH
from fbclassifier.classifiers.constants import UNKNOWN_TOKEN_PROB
from fbclassifier.classifiers.constants import UNKNOWN_TOKEN_STRENGTH
from fbclassifier.errors import CategoryNotFound
from fbclassifier.stores.memory import MemoryStore
from fbclassifier.tokenizer import Tokenizer

#: A signal that is emitted when a category is registered.
#:
#: Subscribers to this signal receive the classifier that emitted the signal,
#: along with a ``category`` keyword argument.  It is emitted for categories
#: that already existed as well, since registration is idempotent.
category_added = signal('category-added')

#: A signal that is emitted after a document has been trained.
#:
#: Subscribers receive the classifier, along with ``category`` and ``tokens``
#: keyword arguments.
document_trained = signal('document-trained')

#: A signal that is emitted after a document has been untrained.
#:
#: Subscribers receive the classifier, along with ``category`` and ``tokens``
#: keyword arguments.
document_untrained = signal('document-untrained')


def select_discriminators(clues, min_strength=MINIMUM_PROB_STRENGTH,
                          max_count=MAX_DISCRIMINATORS):
    """Returns the most discriminating of `clues`.

    `clues` is an iterable of (token, probability) pairs.  Pairs whose
    probability is less than `min_strength` from 0.5 are dropped.  If more
    than `max_count` remain, only the `max_count` farthest from 0.5 are
    returned; ties are broken in favor of the earliest pair.  A `max_count`
    of zero means no limit.

    The returned pairs keep their relative order.

    """
    # (distance, index, token, prob) tuples; the index makes sorting stable
    # and never compares tokens.
    raw = [(abs(prob - 0.5), i, token, prob)
           for i, (token, prob) in enumerate(clues)]
    raw = [tup for tup in raw if tup[0] >= min_strength]

    # If there are too many clues, keep only the strongest.
    if max_count and len(raw) > max_count:
        raw.sort(key=lambda tup: (-tup[0], tup[1]))
        del raw[max_count:]
        raw.sort(key=lambda tup: tup[1])

    return [(token, prob) for _d, _i, token, prob in raw]


class Classifier:
    """Estimates the probability that a document belongs to each of a set
    of categories, from counts of the documents trained in them.

    `store` is the :class:`~fbclassifier.stores.Store` that owns every count;
    if not specified, a new :class:`~fbclassifier.stores.MemoryStore` is
    used.  `tokenizer` is any object with a ``tokenize(text)`` method; if not
    specified, a default :class:`~fbclassifier.tokenizer.Tokenizer` is used.

    The remaining keyword arguments override the defaults in
    :mod:`fbclassifier.classifiers.constants`; :exc:`ValueError` is raised
    for values out of range.

    The classifier itself keeps no counts, so any number of threads may
    classify documents at once, as long as the store is thread-safe.

    """

    def __init__(self, store=None, tokenizer=None,
                 unknown_token_probability=UNKNOWN_TOKEN_PROB,
                 unknown_token_strength=UNKNOWN_TOKEN_STRENGTH,
                 max_discriminators=MAX_DISCRIMINATORS,
                 min_probability_strength=MINIMUM_PROB_STRENGTH):
        if not 0 <= unknown_token_probability <= 1:
            raise ValueError('unknown_token_probability must be in [0, 1]')
        if unknown_token_strength < 0:
            raise ValueError('unknown_token_strength must not be negative')
        if max_discriminators < 0:
            raise ValueError('max_discriminators must not be negative')
        if not 0 <= min_probability_strength <= 0.5:
            raise ValueError('min_probability_strength must be in [0, 0.5]')
        self.store = store if store is not None else MemoryStore()
        self.tokenizer = tokenizer if tokenizer is not None else Tokenizer()
        self.unknown_token_probability = unknown_token_probability
        self.unknown_token_strength = unknown_token_strength
        self.max_discriminators = max_discriminators
        self.min_probability_strength = min_probability_strength

    def options(self):
        """Returns the tunables of this classifier as a dictionary."""
        return dict(
            unknown_token_probability=self.unknown_token_probability,
            unknown_token_strength=self.unknown_token_strength,
            max_discriminators=self.max_discriminators,
            min_probability_strength=self.min_probability_strength,
        )

    def add_category(self, name):
        """Registers the category `name`, if it doesn't already exist."""
        self.store.add_category(name)
        category_added.send(self, category=name)

    def categories(self):
        """Returns a dictionary mapping each registered category to the
        number of documents trained in it.

        """
        return self.store.categories()

    def train(self, category, text):
        """Teach the classifier that `text` is a document in `category`.

        Raises :exc:`~fbclassifier.errors.CategoryNotFound` if `category`
        has not been registered, in which case nothing is learned.

        """
        tokens = self.tokenizer.tokenize(text)
        logging.debug('training %r with %d tokens', category, len(tokens))
        self.store.add_document(category, tokens)
        document_trained.send(self, category=category, tokens=tokens)

    def untrain(self, category, text):
        """Un-learns the document `text` in `category`.

        In case of a mistaken invocation of :meth:`train`, call this method
        with the same arguments.  Raises
        :exc:`~fbclassifier.errors.NegativeCount` if the document could not
        have been trained, in which case nothing changes.

        """
        tokens = self.tokenizer.tokenize(text)
        logging.debug('untraining %r with %d tokens', category, len(tokens))
        # can raise NegativeCount if the database is fouled.  If this is the
        # case, then retraining is the only recovery option.
        self.store.remove_document(category, tokens)
        document_untrained.send(self, category=category, tokens=tokens)

    def token_probability(self, ratio, ratiosum, total):
        """Returns the probability that a document is in a category given
        that it contains a token.

        `ratio` is the fraction of the category's documents containing the
        token, `ratiosum` is the sum of that fraction over every category,
        and `total` is the number of documents, in all categories, containing
        the token.

        Implementation note: this is the Graham calculation, but stripped of
        both biases and clamping into the interval [0.01, 0.99]. The Bayesian
        adjustment following keeps them in a sane range, and one that
        naturally grows the more evidence there is to back up a probability.

        """
        if ratiosum == 0:
            return self.unknown_token_probability

        # Rounding could put this a hair above 1.
        prob = min(ratio / ratiosum, 1.0)

        S = self.unknown_token_strength
        StimesX = S * self.unknown_token_probability

        # Now do Robinson's Bayesian adjustment.
        #
        #         s*x + n*p(w)
        # f(w) = --------------
        #           s + n
        #
        # I find this easier to reason about like so (equivalent when
        # s != 0):
        #
        #        x - p
        #  p +  -------
        #       1 + n/s
        #
        # In other words, it moves p a fraction of the distance from p to x,
        # and less so the larger n is, or the smaller s is.
        n = total
        return (StimesX + n * prob) / (S + n)

    def probabilities(self, tokens, categories=None):
        """Returns a dictionary mapping each category to the list of the
        probabilities that a document containing each of `tokens` is in
        that category.

        `tokens` is a sequence of distinct strings; each list of
        probabilities is aligned with it.  If `categories` is ``None``, every
        registered category is included, otherwise
        :exc:`~fbclassifier.errors.CategoryNotFound` is raised for any
        category that is not registered.

        The counts of every registered category are read, since the
        probability for one category depends on how often the token appears
        in all the others.

        """
        tokens = list(tokens)
        documentcounts, tokencounts = self.store.snapshot(tokens)
        if categories is None:
            categories = list(documentcounts)
        else:
            categories = list(categories)
        for category in categories:
            if category not in documentcounts:
                raise CategoryNotFound(category)

        # An empty category counts as one document, so as not to divide
        # by zero.
        divisors = {category: documentcounts[category] or 1
                    for category in tokencounts}

        result = {category: [] for category in categories}
        for token in tokens:
            ratios = {}
            total = 0
            for category, counts in tokencounts.items():
                count = counts[token]
                if count > divisors[category]:
                    logging.warning('Token %r seen in more %r documents than'
                                    ' were trained', token, category)
                ratios[category] = count / divisors[category]
                total += count
            ratiosum = sum(ratios.values())
            for category in categories:
                result[category].append(
                    self.token_probability(ratios[category], ratiosum, total))
        return result

    def discriminators(self, tokens, categories=None):
        """Returns a dictionary mapping each category to a list of (token,
        probability) pairs, the most discriminating tokens for the category
        sorted by increasing probability.

        See :meth:`probabilities` and :func:`select_discriminators`.

        """
        tokens = list(tokens)
        probabilities = self.probabilities(tokens, categories)
        result = {}
        for category, probs in probabilities.items():
            clues = select_discriminators(zip(tokens, probs),
                                          self.min_probability_strength,
                                          self.max_discriminators)
            clues.sort(key=lambda x: x[1])
            result[category] = clues
        return result

    # Implementation note: Across vectors of length n, containing random
    # uniformly-distributed probabilities, -2*sum(ln(p_i)) follows the
    # chi-squared distribution with 2*n degrees of freedom.  Under the
    # hypothesis that a document is not in a category, the probabilities of
    # its tokens are taken to be uniformly distributed; many tokens with a
    # high probability make the statistic small and the right tail
    # probability large.
    def classify(self, text, categories=None, evidence=False):
        """Returns best-guess probabilities that `text` is in each of
        `categories`.

        `text` is given to the tokenizer.  The return value is a dictionary
        mapping each category to a float in the interval [0.0, 1.0]; each is
        independent of the others.  If `categories` is ``None`` every
        registered category is scored.  A category for which no token
        survives selection scores exactly 0.5.

        If `evidence` is ``True``, the return value is a pair in which the
        first element is the dictionary described above and the second is a
        dictionary mapping each category to its list of (token, probability)
        clues, sorted by increasing probability.

        """
        tokens = self.tokenizer.tokenize(text)
        clues = self.discriminators(tokens, categories)
        scores = {}
        for category, pairs in clues.items():
            scores[category] = fisher_combine(prob for _t, prob in pairs)
            logging.debug('%r scores %.4f from %d of %d tokens', category,
                          scores[category], len(pairs), len(tokens))
        if evidence:
            return scores, clues
        return scores

    def probability(self, text, category):
        """Returns the probability that `text` is in `category`.

        This is a convenience for ``self.classify(text, [category])``.

        """
        return self.classify(text, [category])[category]
