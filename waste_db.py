#!/usr/bin/env python3
# waste_db.py

"""
SQLite Record Store for waste items.

Tables
------
* waste_items – one row per waste record, ids assigned by SQLite
* audit_log   – who added / deleted what, and when
"""

import logging
import sqlite3
from datetime import datetime
from typing import List, Optional

from waste_inventory import (
    StoreDeleteError,
    StoreError,
    StoreInsertError,
    StoreLoadError,
    WasteItem,
)

logger = logging.getLogger(__name__)

DB_FILE = "./waste_management.db"


# --------------------------------------------------------------------- #
#   Database Manager
# --------------------------------------------------------------------- #
class WasteDatabase:
    def __init__(self, db_path: str = DB_FILE, username: str = "operator"):
        self.db_path = db_path
        self.username = username
        self.init_database()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def init_database(self) -> None:
        """Create tables if absent. Failures are fatal, so they surface as StoreLoadError."""
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            logger.error(f"Cannot open database '{self.db_path}': {e}", exc_info=True)
            raise StoreLoadError(f"cannot open database '{self.db_path}': {e}") from e

        try:
            cursor = conn.cursor()

            # Waste items table
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS waste_items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT,
                    quantity REAL,
                    wasteType TEXT,
                    location TEXT,
                    method TEXT
                )
            ''')

            # Audit log table
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS audit_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT,
                    action TEXT,
                    details TEXT,
                    timestamp TEXT
                )
            ''')

            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Cannot initialise database '{self.db_path}': {e}", exc_info=True)
            raise StoreLoadError(f"cannot initialise database '{self.db_path}': {e}") from e
        finally:
            conn.close()
        logger.info(f"Database ready at '{self.db_path}'")

    def _log_action(self, cursor: sqlite3.Cursor, action: str, details: str) -> None:
        cursor.execute('''
            INSERT INTO audit_log (username, action, details, timestamp)
            VALUES (?, ?, ?, ?)
        ''', (self.username, action, details, datetime.now().isoformat()))

    # --------------------------------------------------------------------- #
    #  Record Store API
    # --------------------------------------------------------------------- #
    def load_all(self) -> List[WasteItem]:
        """Return every waste item in id order."""
        try:
            conn = self._connect()
            try:
                cursor = conn.cursor()
                cursor.execute(
                    'SELECT id, name, quantity, wasteType, location, method '
                    'FROM waste_items ORDER BY id'
                )
                rows = cursor.fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error loading waste items: {e}", exc_info=True)
            raise StoreLoadError(f"error loading waste items: {e}") from e

        items = []
        for row in rows:
            items.append(WasteItem(
                id=row[0], name=row[1] or "", quantity=row[2] or 0.0,
                waste_type=row[3] or "", location=row[4] or "", method=row[5] or "",
            ))
        return items

    def insert(self, item: WasteItem) -> int:
        """Persist ``item`` and return the id SQLite assigned to it."""
        try:
            conn = self._connect()
            try:
                with conn:
                    cursor = conn.cursor()
                    cursor.execute('''
                        INSERT INTO waste_items (name, quantity, wasteType, location, method)
                        VALUES (?, ?, ?, ?, ?)
                    ''', (item.name, item.quantity, item.waste_type, item.location, item.method))
                    new_id = cursor.lastrowid
                    self._log_action(cursor, "ADD",
                                     f"Added {item.quantity} of {item.name} ({item.waste_type}) as #{new_id}")
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error inserting waste item {item.name!r}: {e}", exc_info=True)
            raise StoreInsertError(str(e)) from e

        logger.info(f"Inserted waste item #{new_id}")
        return new_id

    def delete_by_id(self, item_id: int) -> None:
        """Delete a row; deleting a missing id is a no-op."""
        try:
            conn = self._connect()
            try:
                with conn:
                    cursor = conn.cursor()
                    cursor.execute('DELETE FROM waste_items WHERE id = ?', (item_id,))
                    if cursor.rowcount:
                        self._log_action(cursor, "DELETE", f"Deleted item #{item_id}")
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error deleting waste item #{item_id}: {e}", exc_info=True)
            raise StoreDeleteError(str(e)) from e

        logger.info(f"Deleted waste item #{item_id}")

    def audit_entries(self, limit: Optional[int] = None) -> List[tuple]:
        """Return (username, action, details, timestamp) rows, newest first."""
        query = 'SELECT username, action, details, timestamp FROM audit_log ORDER BY id DESC'
        params: tuple = ()
        if limit is not None:
            query += ' LIMIT ?'
            params = (limit,)
        try:
            conn = self._connect()
            try:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return cursor.fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error reading audit log: {e}", exc_info=True)
            raise StoreError(f"error reading audit log: {e}") from e
