# constants.py - default values of the classifier tunables
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.

#: These two control the prior assumption about token probabilities.
#: unknown_token_prob is essentially the probability given to a token that has
#: never been seen before.  Nobody has reported an improvement via moving it
#: away from 1/2.
UNKNOWN_TOKEN_PROB = 0.5

#: This adjusts how much weight to give the prior assumption relative to the
#: probabilities estimated by counting.  At 0, the counting estimates are
#: believed 100%, even to the extent of assigning certainty (0 or 1) to a token
#: that has appeared in only one category.  This is a disaster.
#:
#: As unknown_token_strength tends toward infinity, all probabilities tend
#: toward unknown_token_prob.  All reports were that a value near 0.4 worked
#: best, so this does not seem to be corpus-dependent.
UNKNOWN_TOKEN_STRENGTH = 0.45

#: When scoring a document, ignore all tokens with abs(probability - 0.5) <
#: minimum_prob_strength.  This may be a hack, but it has proved to reduce
#: error rates in many tests.  0.1 appeared to work well across all corpora.
MINIMUM_PROB_STRENGTH = 0.1

#: The maximum number of extreme tokens to look at in a document, where
#: "extreme" means with probability farthest away from 0.5.  150 appears to
#: work well across all corpora tested, and makes it easy to prove that the
#: chi-squared math is immune from numeric problems.  Zero means no limit.
MAX_DISCRIMINATORS = 150
