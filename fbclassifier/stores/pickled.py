# pickled.py - an in-memory count store persisted in a pickle
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
import logging
import os

from fbclassifier.safepickle import pickle_read
from fbclassifier.safepickle import pickle_write
from fbclassifier.stores.memory import MemoryStore


class PickleStore(MemoryStore):
    """Count store persisted in a pickle.

    `filename` is the location of the pickle file. Calls to :meth:`load` and
    :meth:`store` will read and write to this location.  Counts are only
    written when :meth:`store` (or :meth:`close`) is called; this database
    is relatively slow to write, but quick to train on huge amounts of
    documents.

    """

    def __init__(self, filename):
        super().__init__()
        self.filename = filename
        self.load()

    def load(self):
        """Replace the counts in memory with those in the pickle."""
        logging.debug('Loading state from %s pickle', self.filename)
        if not os.path.exists(self.filename):
            logging.debug('%s is a new pickle', self.filename)
            with self.lock:
                self.categoryinfo = {}
            return

        tempstore = pickle_read(self.filename)
        # The loaded records are shared between tempstore and self; the tiny
        # tempstore object is reclaimed when load() returns.
        with self.lock:
            self.categoryinfo = tempstore.categoryinfo
        logging.debug('%s is an existing pickle, with %d categories',
                      self.filename, len(self.categoryinfo))

    def store(self):
        """Pickles the counts held by this object."""
        logging.debug('Persisting %s as pickle', self.filename)
        # __getstate__ holds the lock, so the pickle is a consistent snapshot.
        pickle_write(self.filename, self)

    def close(self):
        self.store()
