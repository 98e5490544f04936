# safepickle.py - pickle functions with concurrency locks
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
import os
import pickle
import shutil

from lockfile import FileLock
from tempfile import NamedTemporaryFile


#: The number of seconds for which to acquire a file lock. An exception is
#: raised if the file is still locked after this number of seconds.
DEFAULT_TIMEOUT = 20


def pickle_read(filename, timeout=DEFAULT_TIMEOUT):
    """Read pickle file contents with a lock."""
    with FileLock(filename, timeout=timeout):
        with open(filename, 'rb') as f:
            return pickle.load(f)


def pickle_write(filename, value, protocol=pickle.HIGHEST_PROTOCOL,
                 timeout=DEFAULT_TIMEOUT):
    """Store value as a pickle without creating corruption."""
    with FileLock(filename, timeout=timeout):
        # Dump the pickle data to a temporary file in the same directory
        # first, then move it over the requested filename, so that readers
        # never see a partially written pickle.
        directory = os.path.dirname(os.path.abspath(filename))
        with NamedTemporaryFile(dir=directory, delete=False) as fp:
            pickle.dump(value, fp, protocol)
        shutil.move(fp.name, filename)
