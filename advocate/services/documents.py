"""
Document records.

A document row describes a file kept in a :class:`.files.FileStore`; this
module only handles the rows. Deleted documents are only flagged, and their
files are left in the store.
"""

from collections import Counter
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import uuid

from pytz import UTC
from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError

from .database import db, DBDocument, DatabaseUnavailable, paginate, \
    transaction

logger = logging.getLogger(__name__)

CATEGORIES = ('contract', 'pleading', 'motion', 'brief', 'evidence',
              'correspondence', 'discovery', 'settlement', 'court-order',
              'statute', 'regulation', 'case-law', 'memo', 'research',
              'client-file', 'other')
STATUSES = ('uploaded', 'processing', 'processed', 'error', 'archived')
ANNOTATION_TYPES = ('highlight', 'note', 'bookmark')

FILE_TYPES = {
    '.pdf': 'pdf',
    '.doc': 'doc',
    '.docx': 'docx',
    '.txt': 'txt',
    '.rtf': 'rtf',
    '.jpg': 'jpg',
    '.jpeg': 'jpeg',
    '.png': 'png',
    '.gif': 'gif',
}

ALLOWED_EXTENSIONS = ('.pdf', '.doc', '.docx', '.txt', '.rtf')
ALLOWED_MIME_TYPES = (
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'text/plain',
    'text/rtf',
)

SORTABLE = {
    'createdAt': DBDocument.created_at,
    'updatedAt': DBDocument.updated_at,
    'title': DBDocument.title,
    'fileSize': DBDocument.file_size,
    'lastAccessed': DBDocument.last_accessed,
}

_FIELDS = {
    'title': 'title',
    'description': 'description',
    'category': 'category',
    'tags': 'tags',
}


class NoSuchDocument(RuntimeError):
    """The document does not exist, or has been deleted."""


def _now() -> datetime:
    return datetime.now(tz=UTC)


def file_type(filename: str) -> str:
    """Classify a file by its extension."""
    return FILE_TYPES.get(os.path.splitext(filename or '')[1].lower(),
                          'other')


def is_allowed(filename: str, mime_type: Optional[str]) -> bool:
    """Either the extension or the MIME type must be one we accept."""
    if (filename or '').lower().endswith(ALLOWED_EXTENSIONS):
        return True
    return any(allowed in (mime_type or '') for allowed in ALLOWED_MIME_TYPES)


def stored_name(filename: str) -> str:
    """Generate a unique name to store an upload under."""
    extension = os.path.splitext(filename or '')[1].lower()
    return f'doc_{uuid.uuid4().hex}{extension}'


def to_dict(doc: DBDocument) -> Dict[str, Any]:
    """Get the API representation of a document."""
    return {
        'id': str(doc.document_id),
        'userId': str(doc.user_id),
        'caseId': str(doc.case_id) if doc.case_id else None,
        'title': doc.title,
        'description': doc.description,
        'filename': doc.filename,
        'originalName': doc.original_name,
        'fileSize': doc.file_size,
        'mimeType': doc.mime_type,
        'fileType': doc.file_type,
        'category': doc.category,
        'status': doc.status,
        'tags': list(doc.tags or []),
        'annotations': list(doc.annotations or []),
        'downloadCount': doc.download_count or 0,
        'lastAccessed': doc.last_accessed,
        'createdAt': doc.created_at,
        'updatedAt': doc.updated_at,
    }


def _visible(user_id: str) -> Any:
    return db.session.query(DBDocument).filter(
        DBDocument.user_id == int(user_id),
        DBDocument.is_deleted.is_(False)
    )


def _load_or_fail(document_id: Any, user_id: str) -> DBDocument:
    try:
        pk = int(document_id)
    except (TypeError, ValueError) as e:
        raise NoSuchDocument(document_id) from e
    try:
        doc = _visible(user_id).filter(DBDocument.document_id == pk).first()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e
    if doc is None:
        raise NoSuchDocument(document_id)
    return doc


def get_document(document_id: Any, user_id: str) -> Dict[str, Any]:
    """Get a document, marking it as accessed."""
    doc = _load_or_fail(document_id, user_id)
    with transaction():
        doc.last_accessed = _now()
    return to_dict(doc)


def list_documents(user_id: str, page: int = 1, limit: int = 20,
                   search: Optional[str] = None,
                   category: Optional[str] = None,
                   kind: Optional[str] = None,
                   case_id: Optional[str] = None,
                   sort_by: str = 'createdAt',
                   sort_order: str = 'desc'
                   ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    query = _visible(user_id)
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            DBDocument.title.ilike(pattern),
            DBDocument.description.ilike(pattern),
            cast(DBDocument.tags, String).ilike(pattern)
        ))
    if category:
        query = query.filter(DBDocument.category == category)
    if kind:
        query = query.filter(DBDocument.file_type == kind)
    if case_id:
        try:
            query = query.filter(DBDocument.case_id == int(case_id))
        except ValueError:
            return [], {'current': page, 'total': 0, 'count': 0,
                        'totalRecords': 0}
    column = SORTABLE.get(sort_by, DBDocument.created_at)
    query = query.order_by(column.desc() if sort_order == 'desc'
                           else column.asc())
    rows, pagination = paginate(query, page, limit)
    return [to_dict(row) for row in rows], pagination


def search(user_id: str, terms: str, page: int = 1, limit: int = 10
           ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """Find documents whose title, description, name or tags match."""
    words = [word for word in terms.split() if word]
    query = _visible(user_id)
    if words:
        query = query.filter(or_(*[
            clause for word in words for clause in (
                DBDocument.title.ilike(f'%{word}%'),
                DBDocument.description.ilike(f'%{word}%'),
                DBDocument.original_name.ilike(f'%{word}%'),
                cast(DBDocument.tags, String).ilike(f'%{word}%')
            )
        ]))
    query = query.order_by(DBDocument.created_at.desc())
    rows, pagination = paginate(query, page, limit)
    return [to_dict(row) for row in rows], pagination


def create_document(user_id: str, filename: str, original_name: str,
                    size: int, mime_type: Optional[str],
                    data: Dict[str, Any],
                    case_id: Optional[str] = None) -> Dict[str, Any]:
    """Record a file that has been put in the file store."""
    doc = DBDocument(
        user_id=int(user_id),
        case_id=int(case_id) if case_id else None,
        title=data.get('title') or original_name,
        description=data.get('description') or '',
        filename=filename,
        original_name=original_name,
        file_size=size,
        mime_type=mime_type,
        file_type=file_type(original_name),
        category=data.get('category') or 'other',
        status='uploaded',
        tags=list(data.get('tags') or []),
        annotations=[],
        download_count=0,
    )
    with transaction() as session:
        session.add(doc)
    logger.info('Recorded document %s (%s bytes) for user %s',
                doc.document_id, size, user_id)
    return to_dict(doc)


def update_document(document_id: Any, user_id: str,
                    data: Dict[str, Any]) -> Dict[str, Any]:
    doc = _load_or_fail(document_id, user_id)
    with transaction():
        for field, column in _FIELDS.items():
            if field in data:
                setattr(doc, column, data[field])
        doc.updated_at = _now()
    return to_dict(doc)


def delete_document(document_id: Any, user_id: str) -> None:
    """Flag a document as deleted."""
    doc = _load_or_fail(document_id, user_id)
    with transaction():
        doc.is_deleted = True
        doc.deleted_at = _now()


def record_download(document_id: Any, user_id: str) -> Dict[str, Any]:
    """Count a download; returns the document."""
    doc = _load_or_fail(document_id, user_id)
    with transaction():
        doc.download_count = (doc.download_count or 0) + 1
        doc.last_accessed = _now()
    return to_dict(doc)


def stored_file(document_id: Any, user_id: str) -> Dict[str, Any]:
    """Get a document without marking it as accessed."""
    return to_dict(_load_or_fail(document_id, user_id))


def add_annotation(document_id: Any, user_id: str,
                   data: Dict[str, Any]) -> Dict[str, Any]:
    """Annotate a document; returns the document."""
    doc = _load_or_fail(document_id, user_id)
    annotation = {
        'id': uuid.uuid4().hex,
        'type': data['type'],
        'page': data.get('page'),
        'position': data.get('position'),
        'content': data.get('content'),
        'color': data.get('color'),
        'createdAt': _now().isoformat(),
    }
    with transaction():
        doc.annotations = list(doc.annotations or []) + [annotation]
        doc.updated_at = _now()
    return to_dict(doc)


def categories(user_id: str) -> List[str]:
    """The categories a user has filed documents under."""
    try:
        rows = _visible(user_id).with_entities(DBDocument.category) \
            .distinct().order_by(DBDocument.category).all()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e
    return [category for category, in rows]


def count_for_user(user_id: str) -> int:
    try:
        return _visible(user_id).with_entities(
            func.count(DBDocument.document_id)).scalar()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e


def statistics(user_id: str) -> Dict[str, Any]:
    """Summarize a user's documents."""
    try:
        rows = _visible(user_id).all()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e
    total = sum(r.file_size or 0 for r in rows)
    return {
        'totalDocuments': len(rows),
        'totalSize': total,
        'averageSize': round(total / len(rows)) if rows else 0,
        'categoryBreakdown': dict(Counter(r.category for r in rows)),
        'fileTypeBreakdown': dict(Counter(r.file_type for r in rows)),
        'generatedAt': _now(),
    }
