# test_safepickle.py - unit tests for the fbclassifier.safepickle module
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
import os

from fbclassifier.safepickle import pickle_read
from fbclassifier.safepickle import pickle_write


def test_write_and_read(tmp_path):
    filename = str(tmp_path / 'value.pickle')
    pickle_write(filename, {'spam': (1, {'this': 1})})
    assert pickle_read(filename) == {'spam': (1, {'this': 1})}
    assert not os.path.exists(filename + '.lock')


def test_overwrite(tmp_path):
    filename = str(tmp_path / 'value.pickle')
    pickle_write(filename, [1, 2, 3])
    pickle_write(filename, [4])
    assert pickle_read(filename) == [4]
