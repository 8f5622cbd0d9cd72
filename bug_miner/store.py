"""
SQLite fact store for mined revisions and the rankings derived from them.
"""

import sqlite3

import pandas as pd

from .config import ENTITY_KINDS
from .errors import StoreError

SCHEMA = """
CREATE TABLE IF NOT EXISTS revisions(
  revision_id INTEGER PRIMARY KEY AUTOINCREMENT,
  sha1        TEXT NOT NULL UNIQUE,
  message     TEXT
);

CREATE TABLE IF NOT EXISTS bugs(
  bug_id      TEXT    NOT NULL,
  revision_id INTEGER NOT NULL REFERENCES revisions (revision_id),
  UNIQUE (bug_id, revision_id)
);

CREATE TABLE IF NOT EXISTS files(
  file_id INTEGER PRIMARY KEY AUTOINCREMENT,
  file    TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS file_changes(
  file_id     INTEGER NOT NULL REFERENCES files (file_id),
  revision_id INTEGER NOT NULL REFERENCES revisions (revision_id),
  UNIQUE (file_id, revision_id)
);

CREATE TABLE IF NOT EXISTS functions(
  function_id INTEGER PRIMARY KEY AUTOINCREMENT,
  function    TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS function_changes(
  function_id INTEGER NOT NULL REFERENCES functions (function_id),
  revision_id INTEGER NOT NULL REFERENCES revisions (revision_id),
  UNIQUE (function_id, revision_id)
);

CREATE VIEW IF NOT EXISTS bug_prone_functions AS
SELECT function, COUNT(*) AS function_count
  FROM functions
  JOIN function_changes USING (function_id)
  JOIN bugs             USING (revision_id)
 GROUP BY function_id
 ORDER BY function_count DESC, function ASC;

CREATE VIEW IF NOT EXISTS frequently_changed_functions AS
SELECT function, COUNT(*) AS function_count
  FROM functions
  JOIN function_changes USING (function_id)
 GROUP BY function_id
 ORDER BY function_count DESC, function ASC;

CREATE VIEW IF NOT EXISTS co_changed_functions AS
SELECT f1.function AS changed_function,
       f2.function AS co_changed_function,
       COUNT(*)    AS co_changed_function_count
  FROM function_changes c1
  JOIN function_changes c2 ON c1.revision_id = c2.revision_id
   AND c1.function_id != c2.function_id
  JOIN functions f1 ON c1.function_id = f1.function_id
  JOIN functions f2 ON c2.function_id = f2.function_id
 GROUP BY changed_function, co_changed_function
 ORDER BY changed_function ASC,
          co_changed_function_count DESC,
          co_changed_function ASC;

CREATE VIEW IF NOT EXISTS bug_prone_files AS
SELECT file, COUNT(*) AS file_count
  FROM files
  JOIN file_changes USING (file_id)
  JOIN bugs         USING (revision_id)
 GROUP BY file_id
 ORDER BY file_count DESC, file ASC;

CREATE VIEW IF NOT EXISTS frequently_changed_files AS
SELECT file, COUNT(*) AS file_count
  FROM files
  JOIN file_changes USING (file_id)
 GROUP BY file_id
 ORDER BY file_count DESC, file ASC;

CREATE VIEW IF NOT EXISTS co_changed_files AS
SELECT p1.file  AS changed_file,
       p2.file  AS co_changed_file,
       COUNT(*) AS co_changed_file_count
  FROM file_changes c1
  JOIN file_changes c2 ON c1.revision_id = c2.revision_id
   AND c1.file_id != c2.file_id
  JOIN files p1 ON c1.file_id = p1.file_id
  JOIN files p2 ON c2.file_id = p2.file_id
 GROUP BY changed_file, co_changed_file
 ORDER BY changed_file ASC,
          co_changed_file_count DESC,
          co_changed_file ASC;
"""

# category -> (table, id column, value column); never built from user input
_ENTITY_TABLES = {
    'revisions': ('revisions', 'revision_id', 'sha1'),
    'files': ('files', 'file_id', 'file'),
    'functions': ('functions', 'function_id', 'function'),
}

_TABLES = ('revisions', 'bugs', 'files', 'file_changes', 'functions', 'function_changes')


def _check_kind(kind: str):
    if kind not in ENTITY_KINDS:
        raise ValueError(f"Unknown entity kind {kind!r}, expected one of {ENTITY_KINDS}")


class FactStore:
    """
    Append-only store of revisions, changed files/functions and bug links.

    Each recorded revision is committed in its own transaction, so a failed
    run keeps everything recorded before the failure.
    """

    def __init__(self, path: str = ':memory:'):
        self.path = str(path)
        try:
            self.connection = sqlite3.connect(self.path)
            self.connection.execute('PRAGMA foreign_keys = ON')
            self.connection.executescript(SCHEMA)
        except sqlite3.Error as e:
            raise StoreError(f"cannot open database {self.path}: {e}") from e

    def close(self):
        self.connection.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def get_or_create_id(self, category: str, value: str) -> int:
        """Return the id stored for value, inserting it first if needed"""
        try:
            table, id_column, value_column = _ENTITY_TABLES[category]
        except KeyError:
            raise ValueError(f"Unknown category {category!r}") from None

        try:
            row = self.connection.execute(
                f'SELECT {id_column} FROM {table} WHERE {value_column} = ?', (value,)
            ).fetchone()
            if row is not None:
                return row[0]

            insert = f'INSERT INTO {table} ({value_column}) VALUES (?)'
            if self.connection.in_transaction:
                # Part of record_revision's transaction
                return self.connection.execute(insert, (value,)).lastrowid
            with self.connection:
                return self.connection.execute(insert, (value,)).lastrowid
        except sqlite3.Error as e:
            raise StoreError(f"cannot store {value!r} in {table}: {e}") from e

    def has_revision(self, sha1: str) -> bool:
        try:
            row = self.connection.execute(
                'SELECT 1 FROM revisions WHERE sha1 = ?', (sha1,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"cannot look up revision {sha1}: {e}") from e
        return row is not None

    def record_revision(
        self,
        sha1: str,
        changed_files,
        changed_functions,
        bug_id: str | None = None,
        message: str | None = None,
    ) -> int | None:
        """
        Record one mined revision with its bug link and change edges.

        Returns the new revision id, or None when sha1 was already recorded
        (the existing facts are left untouched).
        """
        if self.has_revision(sha1):
            return None

        try:
            with self.connection:
                cursor = self.connection.execute(
                    'INSERT INTO revisions (sha1, message) VALUES (?, ?)', (sha1, message)
                )
                revision_id = cursor.lastrowid

                if bug_id is not None:
                    self.connection.execute(
                        'INSERT INTO bugs (bug_id, revision_id) VALUES (?, ?)',
                        (str(bug_id), revision_id),
                    )

                for path in sorted(set(changed_files)):
                    file_id = self.get_or_create_id('files', path)
                    self.connection.execute(
                        'INSERT INTO file_changes (file_id, revision_id) VALUES (?, ?)',
                        (file_id, revision_id),
                    )

                for function in sorted(set(changed_functions)):
                    function_id = self.get_or_create_id('functions', function)
                    self.connection.execute(
                        'INSERT INTO function_changes (function_id, revision_id) VALUES (?, ?)',
                        (function_id, revision_id),
                    )
        except sqlite3.Error as e:
            raise StoreError(f"cannot record revision {sha1}: {e}") from e

        return revision_id

    # =========================================================================
    # RANKINGS
    # =========================================================================

    def _read_view(self, view: str) -> pd.DataFrame:
        try:
            return pd.read_sql_query(f'SELECT * FROM {view}', self.connection)
        except (sqlite3.Error, pd.errors.DatabaseError) as e:
            raise StoreError(f"cannot read {view}: {e}") from e

    def bug_prone(self, kind: str = 'file') -> pd.DataFrame:
        """Entities changed in bug-fix revisions, most often first"""
        _check_kind(kind)
        return self._read_view(f'bug_prone_{kind}s')

    def frequently_changed(self, kind: str = 'file') -> pd.DataFrame:
        """Entities by number of revisions changing them, most often first"""
        _check_kind(kind)
        return self._read_view(f'frequently_changed_{kind}s')

    def co_changed(self, kind: str = 'file') -> pd.DataFrame:
        """Pairs of distinct entities changed in the same revision"""
        _check_kind(kind)
        return self._read_view(f'co_changed_{kind}s')

    def counts(self) -> dict:
        """Row count per table"""
        try:
            return {
                table: self.connection.execute(f'SELECT COUNT(*) FROM {table}').fetchone()[0]
                for table in _TABLES
            }
        except sqlite3.Error as e:
            raise StoreError(f"cannot count rows: {e}") from e
