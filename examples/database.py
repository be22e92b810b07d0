"""
Database container example.

A Database owns Table children. Tables buffer rows and must flush them
before the database closes its connection, so teardown order matters:
terminate() on the database tears down every table first.

Run with ``python examples/database.py``.
"""

import logging

from ehierarchy import AccessorPair, EHierarchy, get_object, list_objects

logger = logging.getLogger(__name__)


class Database(EHierarchy):
    """Root container holding a (pretend) connection."""

    def _init(self, config):
        self.declare_property('dsn', AccessorPair(None, self.generic_accessor))
        self.declare_property('committed', default={})
        self.declare_flag('connected', self._on_connected)
        self.apply_config(config)
        return True

    def _on_connected(self, old_value, new_value):
        if old_value != new_value:
            logger.info(f"{self.name}: {'opened' if new_value else 'closed'} connection to {self.dsn}")
        return new_value

    def commit(self, table, rows):
        committed = self.committed
        committed[table] = committed.get(table, 0) + len(rows)
        self.write_property('committed', *[item for pair in committed.items() for item in pair])

    def terminate(self):
        # Children flush through the still-open connection first
        for child in self.children:
            child.terminate()
        logger.info(f"{self.name}: committed rows per table {self.committed}")
        self.connected = False
        super().terminate()


class Table(EHierarchy):
    """Buffers rows until flushed into its parent database."""

    def _init(self, config):
        self.declare_property('pending', default=())
        self.declare_flag('dirty')
        self.apply_config(config)
        return True

    def insert(self, *rows):
        self.pending = self.pending + rows
        self.dirty = True

    def flush(self):
        if not self.dirty:
            return
        database = self.parent
        if not database.connected:
            raise RuntimeError(f"{self.full_name}: connection closed before flush")
        database.commit(self.name, self.pending)
        logger.info(f"{self.full_name}: flushed {len(self.pending)} rows")
        self.pending = ()
        self.dirty = False

    def terminate(self):
        self.flush()
        super().terminate()


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s %(levelname)s %(message)s")

    db = Database(name='inventory', dsn='sqlite:///inventory.db', flags={'connected': True})
    users = Table(parent=db, name='users')
    orders = Table(parent=db, name='orders')

    users.insert({'id': 1, 'name': 'ada'}, {'id': 2, 'name': 'grace'})
    orders.insert({'id': 10, 'user': 1})

    logger.info(f"Live objects: {sorted(list_objects())}")
    logger.info(f"Lookup inventory::orders -> {get_object('inventory::orders')!r}")
    logger.info(f"users dirty: {users.dirty}, orders dirty: {orders.dirty}")

    db.terminate()

    logger.info(f"Live objects after terminate: {list_objects()}")


if __name__ == '__main__':
    main()
