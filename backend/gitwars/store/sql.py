import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from gitwars import db
from gitwars.models import Document
from .base import (
    DocumentExists,
    DocumentNotFound,
    DocumentStore,
    Snapshot,
    StoreError,
    apply_increment,
    split_path,
)


logger = logging.getLogger(__name__)


class SqlStore(DocumentStore):
    """Document store persisted through Flask-SQLAlchemy.

    Every operation runs inside the bound app's context so it can be called
    from socket handlers and background tick tasks alike. Database errors
    surface as :class:`StoreError`.
    """

    def __init__(self, app=None, collections=None):
        super().__init__(collections)
        self.app = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.app = app
        app.extensions['gitwars_store'] = self

    @contextmanager
    def _session(self, path, op):
        with self._lock, self.app.app_context():
            try:
                yield
            except SQLAlchemyError as exc:
                db.session.rollback()
                logger.exception(f"[store-{op}] database error for {path}")
                raise StoreError(f"{op} failed for {path}: {exc}") from exc
            except StoreError:
                db.session.rollback()
                raise

    def _load(self, path, for_update=False):
        collection, doc_id = split_path(path)
        query = Document.query.filter_by(collection=collection, doc_id=doc_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def _commit(self, doc, path):
        db.session.add(doc)
        db.session.commit()
        return Snapshot(path, True, dict(doc.data or {}))

    def _read(self, path):
        with self._session(path, 'read'):
            doc = self._load(path)
            if doc is None:
                return Snapshot(path, False, {})
            return Snapshot(path, True, dict(doc.data or {}))

    def _create(self, path, fields):
        collection, doc_id = split_path(path)
        with self._session(path, 'create'):
            if self._load(path) is not None:
                raise DocumentExists(f"Document {path} already exists")
            doc = Document(collection=collection, doc_id=doc_id, data=fields)
            snapshot = self._commit(doc, path)
        logger.info(f"[store-create] {path} fields={sorted(fields)}")
        return snapshot

    def _update(self, path, fields):
        with self._session(path, 'update'):
            doc = self._load(path, for_update=True)
            if doc is None:
                raise DocumentNotFound(f"Document {path} does not exist")
            merged = dict(doc.data or {})
            merged.update(fields)
            # Reassign so the JSON column registers the change
            doc.data = merged
            return self._commit(doc, path)

    def _increment(self, path, field_name, delta, floor):
        with self._session(path, 'increment'):
            doc = self._load(path, for_update=True)
            if doc is None:
                raise DocumentNotFound(f"Document {path} does not exist")
            doc.data = apply_increment(doc.data or {}, field_name, delta, floor)
            return self._commit(doc, path)
