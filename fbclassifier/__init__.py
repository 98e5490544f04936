# __init__.py - indicates that this directory is a Python package
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
from .classifiers import Classifier
from .errors import CategoryNotFound
from .errors import ClassifierError
from .errors import NegativeCount
from .errors import TokenizationFailure
from .stores import MemoryStore
from .stores import PickleStore
from .stores import SQLStore
from .stores import Store
from .tokenizer import Tokenizer
