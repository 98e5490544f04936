# sql.py - a count store backed by a relational database
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
"""A count store backed by any database supported by SQLAlchemy.

Two tables hold the counts::

    categories (id, name, document_count)
    tokens (id, category_id, token, count)

Every training operation runs in a single transaction, which is rolled back
when any of its checks fails.  Locking granularity and lock timeouts are
those of the database and of the engine given to :class:`SQLStore`; for
SQLite, pass ``connect_args={'timeout': seconds}`` to
:func:`sqlalchemy.create_engine` to bound how long a writer waits for
another.

"""
import logging

from sqlalchemy import Column
from sqlalchemy import ForeignKey
from sqlalchemy import Integer
from sqlalchemy import MetaData
from sqlalchemy import Table
from sqlalchemy import Text
from sqlalchemy import UniqueConstraint
from sqlalchemy import and_
from sqlalchemy import create_engine
from sqlalchemy import delete
from sqlalchemy import func
from sqlalchemy import insert
from sqlalchemy import select
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from fbclassifier.errors import CategoryNotFound
from fbclassifier.errors import NegativeCount
from fbclassifier.stores.base import Store
from fbclassifier.stores.base import unique_tokens

metadata = MetaData()

categories_table = Table(
    'categories', metadata,
    Column('id', Integer, primary_key=True),
    Column('name', Text, nullable=False, unique=True),
    Column('document_count', Integer, nullable=False, default=0),
)

tokens_table = Table(
    'tokens', metadata,
    Column('id', Integer, primary_key=True),
    Column('category_id', Integer, ForeignKey('categories.id'),
           nullable=False),
    Column('token', Text, nullable=False),
    Column('count', Integer, nullable=False, default=0),
    UniqueConstraint('category_id', 'token'),
)


class SQLStore(Store):
    """Count store kept in a relational database.

    `engine` is either a :class:`sqlalchemy.engine.Engine` or a database URL
    from which one is created.  The tables are not created automatically;
    call :meth:`create_tables` on a new database.

    """

    def __init__(self, engine):
        if isinstance(engine, str):
            engine = create_engine(engine)
        self.engine = engine

    def create_tables(self):
        """Create the tables in the database, if they don't exist yet."""
        logging.debug('Creating tables in %s', self.engine.url)
        metadata.create_all(self.engine)

    def close(self):
        self.engine.dispose()

    def _category(self, connection, name):
        """Returns the (id, document_count) row of the category `name`."""
        query = select(categories_table.c.id,
                       categories_table.c.document_count)
        row = connection.execute(
            query.where(categories_table.c.name == name)).first()
        if row is None:
            raise CategoryNotFound(name)
        return row

    def add_category(self, name):
        try:
            with self.engine.begin() as connection:
                query = select(categories_table.c.id)
                query = query.where(categories_table.c.name == name)
                if connection.execute(query).first() is not None:
                    return
                connection.execute(insert(categories_table).values(
                    name=name, document_count=0))
        except IntegrityError:
            # Only another writer registering the same name since we looked
            # makes this a no-op; any other constraint failure propagates.
            with self.engine.connect() as connection:
                query = select(categories_table.c.id)
                query = query.where(categories_table.c.name == name)
                if connection.execute(query).first() is None:
                    raise
            logging.debug('Category %r was registered concurrently', name)
        else:
            logging.debug('Registered category %r', name)

    def add_document(self, category, tokens):
        tokens = unique_tokens(tokens)
        with self.engine.begin() as connection:
            category_id = self._category(connection, category).id
            connection.execute(
                update(categories_table)
                .where(categories_table.c.id == category_id)
                .values(document_count=categories_table.c.document_count + 1))
            for token in tokens:
                result = connection.execute(
                    update(tokens_table)
                    .where(tokens_table.c.category_id == category_id)
                    .where(tokens_table.c.token == token)
                    .values(count=tokens_table.c.count + 1))
                if result.rowcount == 0:
                    connection.execute(insert(tokens_table).values(
                        category_id=category_id, token=token, count=1))

    def remove_document(self, category, tokens):
        tokens = unique_tokens(tokens)
        # Raising inside the block rolls the whole transaction back.
        with self.engine.begin() as connection:
            row = self._category(connection, category)
            result = connection.execute(
                update(categories_table)
                .where(categories_table.c.id == row.id)
                .where(categories_table.c.document_count > 0)
                .values(document_count=categories_table.c.document_count - 1))
            if result.rowcount != 1:
                logging.debug('Refusing to remove a document from empty'
                              ' category %r', category)
                raise NegativeCount('document count of {!r} would go'
                                    ' negative'.format(category))
            documentcount = self._category(connection, category).document_count
            for token in tokens:
                result = connection.execute(
                    update(tokens_table)
                    .where(tokens_table.c.category_id == row.id)
                    .where(tokens_table.c.token == token)
                    .where(tokens_table.c.count > 0)
                    .values(count=tokens_table.c.count - 1))
                if result.rowcount != 1:
                    logging.debug('Refusing to remove %r from category %r',
                                  token, category)
                    raise NegativeCount('count of token {!r} in {!r} would go'
                                        ' negative'.format(token, category))
            highest = connection.execute(
                select(func.max(tokens_table.c.count))
                .where(tokens_table.c.category_id == row.id)).scalar()
            if highest is not None and highest > documentcount:
                raise NegativeCount('a token of {!r} would be counted in more'
                                    ' documents than the category'
                                    ' holds'.format(category))
            connection.execute(
                delete(tokens_table)
                .where(tokens_table.c.category_id == row.id)
                .where(tokens_table.c.count == 0))

    def categories(self):
        query = select(categories_table.c.name,
                       categories_table.c.document_count)
        with self.engine.connect() as connection:
            rows = connection.execute(query.order_by(categories_table.c.id))
            return {name: count for name, count in rows}

    def token_counts(self, categories, tokens):
        return self.snapshot(tokens, categories)[1]

    def snapshot(self, tokens, categories=None):
        tokens = list(tokens)
        # A single statement reads the document counts and the token counts
        # from the same state of the database.
        joined = categories_table.outerjoin(tokens_table, and_(
            tokens_table.c.category_id == categories_table.c.id,
            tokens_table.c.token.in_(tokens)))
        query = (select(categories_table.c.name,
                        categories_table.c.document_count,
                        tokens_table.c.token,
                        tokens_table.c.count)
                 .select_from(joined)
                 .order_by(categories_table.c.id))
        documentcounts = {}
        found = {}
        with self.engine.connect() as connection:
            for name, documentcount, token, count in connection.execute(query):
                documentcounts[name] = documentcount
                counts = found.setdefault(name, {})
                if token is not None:
                    counts[token] = count

        if categories is None:
            categories = list(documentcounts)
        tokencounts = {}
        for category in categories:
            if category not in documentcounts:
                raise CategoryNotFound(category)
            counts = found[category]
            tokencounts[category] = {token: counts.get(token, 0)
                                     for token in tokens}
        return documentcounts, tokencounts
