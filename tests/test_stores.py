# test_stores.py - unit tests for the fbclassifier.stores package
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
import os
import pickle
import shutil
import tempfile
import threading
import unittest

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError

from fbclassifier.errors import CategoryNotFound
from fbclassifier.errors import NegativeCount
from fbclassifier.stores import MemoryStore
from fbclassifier.stores import PickleStore
from fbclassifier.stores import SQLStore


class StoreContract:
    """Tests that every store must pass.

    Subclasses must also inherit from :class:`unittest.TestCase` and define
    :meth:`make_store`.

    """

    def make_store(self):
        raise NotImplementedError

    def setUp(self):
        self.store = self.make_store()
        self.store.add_category('spam')
        self.store.add_category('ham')

    def state(self):
        tokens = ['this', 'spam', 'what', 'ham', 'maybe']
        return self.store.snapshot(tokens)

    def test_add_category(self):
        self.assertEqual(self.store.categories(), {'spam': 0, 'ham': 0})

    def test_add_category_twice(self):
        self.store.add_document('spam', ['this'])
        self.store.add_category('spam')
        self.assertEqual(self.store.categories(), {'spam': 1, 'ham': 0})

    def test_add_document(self):
        self.store.add_document('spam', ['this', 'spam', 'what'])
        self.assertEqual(self.store.categories(), {'spam': 1, 'ham': 0})
        counts = self.store.token_counts(['spam', 'ham'], ['this', 'nope'])
        self.assertEqual(counts, {'spam': {'this': 1, 'nope': 0},
                                  'ham': {'this': 0, 'nope': 0}})

    def test_add_document_unknown_category(self):
        before = self.state()
        self.assertRaises(CategoryNotFound, self.store.add_document, 'none',
                          ['blah'])
        self.assertEqual(self.state(), before)

    def test_duplicate_tokens_count_once(self):
        self.store.add_document('ham', ['what', 'what', 'maybe'])
        counts = self.store.token_counts(['ham'], ['what', 'maybe'])
        self.assertEqual(counts, {'ham': {'what': 1, 'maybe': 1}})

    def test_token_counts_all_categories(self):
        self.store.add_document('ham', ['what'])
        counts = self.store.token_counts(None, ['what'])
        self.assertEqual(counts, {'spam': {'what': 0}, 'ham': {'what': 1}})

    def test_token_counts_unknown_category(self):
        self.assertRaises(CategoryNotFound, self.store.token_counts,
                          ['spam', 'none'], ['what'])

    def test_snapshot(self):
        self.store.add_document('spam', ['this', 'spam'])
        self.store.add_document('spam', ['spam'])
        categories, counts = self.store.snapshot(['spam'])
        self.assertEqual(categories, {'spam': 2, 'ham': 0})
        self.assertEqual(counts, {'spam': {'spam': 2}, 'ham': {'spam': 0}})

    def test_remove_document_restores_counts(self):
        self.store.add_document('ham', ['this', 'maybe'])
        before = self.state()
        self.store.add_document('ham', ['this', 'what', 'ham'])
        self.assertNotEqual(self.state(), before)
        self.store.remove_document('ham', ['this', 'what', 'ham'])
        self.assertEqual(self.state(), before)

    def test_remove_document_unknown_category(self):
        self.assertRaises(CategoryNotFound, self.store.remove_document,
                          'none', ['blah'])

    def test_remove_document_from_empty_category(self):
        before = self.state()
        self.assertRaises(NegativeCount, self.store.remove_document, 'spam',
                          [])
        self.assertEqual(self.state(), before)

    def test_remove_untrained_token(self):
        self.store.add_document('spam', ['this', 'spam'])
        before = self.state()
        self.assertRaises(NegativeCount, self.store.remove_document, 'spam',
                          ['this', 'ham'])
        self.assertEqual(self.state(), before)

    def test_remove_document_keeps_token_within_document_count(self):
        self.store.add_document('spam', ['this', 'what'])
        self.store.add_document('spam', ['this'])
        before = self.state()
        # This would leave 'this' in two of only one document.
        self.assertRaises(NegativeCount, self.store.remove_document, 'spam',
                          ['what'])
        self.assertEqual(self.state(), before)
        self.store.remove_document('spam', ['this'])
        self.assertEqual(self.store.categories()['spam'], 1)

    def test_reads_never_see_part_of_a_write(self):
        self.store.add_document('spam', ['this'])
        before = (1, 1, 0)
        after = (2, 2, 1)
        errors = []

        def train():
            try:
                for _ in range(100):
                    self.store.add_document('spam', ['this', 'spam'])
                    self.store.remove_document('spam', ['this', 'spam'])
            except Exception as exception:
                errors.append(exception)

        writer = threading.Thread(target=train)
        writer.start()
        seen = set()
        while writer.is_alive():
            categories, counts = self.store.snapshot(['this', 'spam'])
            documents = categories['spam']
            spam = counts['spam']
            self.assertLessEqual(spam['this'], documents)
            self.assertLessEqual(spam['spam'], documents)
            state = (documents, spam['this'], spam['spam'])
            self.assertIn(state, (before, after))
            seen.add(state)
        writer.join()
        self.assertEqual(errors, [])
        self.assertEqual(self.store.snapshot(['this', 'spam']),
                         ({'spam': 1, 'ham': 0},
                          {'spam': {'this': 1, 'spam': 0},
                           'ham': {'this': 0, 'spam': 0}}))


class MemoryStoreTest(StoreContract, unittest.TestCase):

    def make_store(self):
        return MemoryStore()

    def test_pickle(self):
        self.store.add_document('spam', ['this', 'spam'])
        copy = pickle.loads(pickle.dumps(self.store))
        self.assertEqual(copy.snapshot(['this', 'spam']),
                         self.store.snapshot(['this', 'spam']))
        # The copy has its own lock and its own counts.
        copy.add_document('spam', ['this'])
        self.assertEqual(self.store.categories()['spam'], 1)

    def test_unpickle_unknown_version(self):
        self.assertRaises(ValueError, MemoryStore().__setstate__, (-1, {}))

    def test_concurrent_training(self):
        def train():
            for _ in range(200):
                self.store.add_document('spam', ['this', 'spam'])
                self.store.add_document('ham', ['this'])

        threads = [threading.Thread(target=train) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(self.store.categories(), {'spam': 800, 'ham': 800})
        counts = self.store.token_counts(None, ['this'])
        self.assertEqual(counts, {'spam': {'this': 800}, 'ham': {'this': 800}})


class PickleStoreTest(StoreContract, unittest.TestCase):

    def setUp(self):
        self.directory = tempfile.mkdtemp()
        self.filename = os.path.join(self.directory, 'counts.pickle')
        super().setUp()

    def tearDown(self):
        shutil.rmtree(self.directory)

    def make_store(self):
        return PickleStore(self.filename)

    def test_new_pickle(self):
        self.assertFalse(os.path.exists(self.filename))

    def test_store_and_load(self):
        self.store.add_document('ham', ['what', 'maybe'])
        self.store.store()
        self.assertTrue(os.path.exists(self.filename))
        other = PickleStore(self.filename)
        self.assertEqual(other.snapshot(['what', 'maybe']),
                         self.store.snapshot(['what', 'maybe']))

    def test_load_discards_unsaved_counts(self):
        self.store.store()
        self.store.add_document('ham', ['what'])
        self.store.load()
        self.assertEqual(self.store.categories(), {'spam': 0, 'ham': 0})

    def test_close_stores(self):
        self.store.add_document('spam', ['spam'])
        self.store.close()
        other = PickleStore(self.filename)
        self.assertEqual(other.categories(), {'spam': 1, 'ham': 0})


class SQLStoreTest(StoreContract, unittest.TestCase):

    def setUp(self):
        # A file, since every thread gets its own in-memory SQLite database.
        self.directory = tempfile.mkdtemp()
        self.filename = os.path.join(self.directory, 'counts.db')
        super().setUp()

    def make_store(self):
        engine = create_engine('sqlite:///' + self.filename,
                               connect_args={'timeout': 30})
        store = SQLStore(engine)
        store.create_tables()
        return store

    def tearDown(self):
        self.store.close()
        shutil.rmtree(self.directory)

    def test_add_category_constraint_failure(self):
        # Only a duplicate name is forgiven; a missing one is an error.
        self.assertRaises(IntegrityError, self.store.add_category, None)
        self.assertEqual(self.store.categories(), {'spam': 0, 'ham': 0})

    def test_engine(self):
        store = SQLStore(create_engine('sqlite://'))
        store.create_tables()
        store.add_category('spam')
        self.assertEqual(store.categories(), {'spam': 0})

    def test_zero_counts_are_deleted(self):
        self.store.add_document('spam', ['this'])
        self.store.remove_document('spam', ['this'])
        counts = self.store.token_counts(['spam'], ['this'])
        self.assertEqual(counts, {'spam': {'this': 0}})
        self.store.add_document('spam', ['this'])
        counts = self.store.token_counts(['spam'], ['this'])
        self.assertEqual(counts, {'spam': {'this': 1}})
