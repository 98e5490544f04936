# __init__.py - indicates that this directory is a Python package
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
from .basic import Classifier
from .basic import category_added
from .basic import document_trained
from .basic import document_untrained
from .basic import select_discriminators
