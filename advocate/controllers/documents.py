"""
Controllers for uploaded documents.

Uploads are checked as a batch before anything is stored: if one file in a
request is rejected, none of them are kept.
"""

import logging
from typing import IO, Any, Dict, List, Optional, Tuple

from flask import current_app
from werkzeug.datastructures import FileStorage, MultiDict

from .. import domain, errors, status
from ..services import cases, documents, files
from .forms import AnnotationForm, DocumentQueryForm, DocumentUpdateForm, \
    DocumentUploadForm, TextSearchForm, check_types, validated

logger = logging.getLogger(__name__)

Response = Tuple[Optional[dict], int, dict]

UPLOAD_FIELD = 'documents'


def document_not_found() -> errors.NotFound:
    return errors.NotFound('Document not found', 'DOCUMENT_NOT_FOUND')


def _size(upload: FileStorage) -> int:
    stream = upload.stream
    position = stream.tell()
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(position)
    return size


def _check_uploads(uploads: List[FileStorage]) -> None:
    max_files = current_app.config['MAX_FILES_PER_UPLOAD']
    max_size = current_app.config['MAX_FILE_SIZE']
    if not uploads:
        raise errors.BadRequest('No files uploaded', 'NO_FILES')
    if len(uploads) > max_files:
        raise errors.BadRequest('Too many files', 'TOO_MANY_FILES',
                                maxFiles=max_files)
    allowed = documents.ALLOWED_EXTENSIONS + documents.ALLOWED_MIME_TYPES
    for upload in uploads:
        if not documents.is_allowed(upload.filename, upload.mimetype):
            raise errors.BadRequest(
                f'File type not allowed. Allowed types: {", ".join(allowed)}',
                'INVALID_FILE_TYPE')
        if _size(upload) > max_size:
            raise errors.BadRequest('File too large', 'FILE_TOO_LARGE',
                                    maxSize=f'{max_size // 2 ** 20}MB')


def upload(principal: domain.Principal, form_data: MultiDict,
           uploaded: MultiDict) -> Response:
    """
    Store the files sent in the ``documents`` field and record each one.

    Title, description, category, case and tags in the form data apply to
    every file in the request; a file without a title is named after
    itself.

    Returns
    -------
    dict
        A message and the new documents.
    int
        201 on success.
    dict
        Headers to add to the response.

    """
    form = validated(DocumentUploadForm, form_data)
    unexpected = [name for name in uploaded.keys() if name != UPLOAD_FIELD]
    if unexpected:
        raise errors.BadRequest('Unexpected file field', 'UNEXPECTED_FILE')
    uploads = [f for f in uploaded.getlist(UPLOAD_FIELD) if f.filename]
    _check_uploads(uploads)

    case_id = form.caseId.data or None
    if case_id and cases.get_owned_case(case_id, principal.user_id) is None:
        raise errors.BadRequest('Case not found or access denied',
                                'INVALID_CASE')

    data: Dict[str, Any] = {
        'title': form.title.data or None,
        'description': form.description.data or '',
        'category': form.category.data or 'other',
        'tags': form_data.getlist('tags'),
    }
    store = files.get_file_store()
    created = []
    for upload_file in uploads:
        name = documents.stored_name(upload_file.filename)
        size = store.save(upload_file, name)
        try:
            created.append(documents.create_document(
                principal.user_id, name, upload_file.filename, size,
                upload_file.mimetype, data, case_id=case_id))
        except Exception:
            store.delete(name)
            raise
    return {
        'message': f'{len(created)} document(s) uploaded successfully',
        'documents': created
    }, status.HTTP_201_CREATED, {}


def list_documents(principal: domain.Principal, params: Any) -> Response:
    form = validated(DocumentQueryForm, params)
    found, pagination = documents.list_documents(
        principal.user_id,
        page=form.page.data or 1,
        limit=form.limit.data or 20,
        search=params.get('search') or None,
        category=form.category.data or None,
        kind=form.fileType.data or None,
        case_id=form.caseId.data or None,
        sort_by=params.get('sortBy') or 'createdAt',
        sort_order=form.sortOrder.data or 'desc'
    )
    return {'documents': found, 'pagination': pagination}, \
        status.HTTP_200_OK, {}


def get_document(principal: domain.Principal, document_id: int) -> Response:
    try:
        document = documents.get_document(document_id, principal.user_id)
    except documents.NoSuchDocument as e:
        raise document_not_found() from e
    return {'document': document}, status.HTTP_200_OK, {}


def update_document(principal: domain.Principal, document_id: int,
                    payload: Any) -> Response:
    payload = payload if isinstance(payload, dict) else {}
    form = validated(DocumentUpdateForm, payload)
    check_types(payload, {'title': str, 'description': str,
                          'category': str, 'tags': list})
    data = {field: payload[field]
            for field in ('title', 'description', 'category', 'tags')
            if field in payload}
    if 'title' in data:
        if not form.title.data:
            raise errors.ValidationFailed([{'field': 'title',
                                            'message': 'Must not be blank'}])
        data['title'] = form.title.data
    try:
        document = documents.update_document(document_id, principal.user_id,
                                             data)
    except documents.NoSuchDocument as e:
        raise document_not_found() from e
    return {
        'message': 'Document updated successfully',
        'document': document
    }, status.HTTP_200_OK, {}


def delete_document(principal: domain.Principal,
                    document_id: int) -> Response:
    try:
        documents.delete_document(document_id, principal.user_id)
    except documents.NoSuchDocument as e:
        raise document_not_found() from e
    return {'message': 'Document deleted successfully'}, \
        status.HTTP_200_OK, {}


def download(principal: domain.Principal,
             document_id: int) -> Tuple[Dict[str, Any], IO[bytes]]:
    """
    Open a document's file and count the download.

    Returns
    -------
    dict
        The document.
    file
        The stored file, open for reading.

    """
    try:
        document = documents.stored_file(document_id, principal.user_id)
    except documents.NoSuchDocument as e:
        raise document_not_found() from e
    try:
        stream = files.get_file_store().open(document['filename'])
    except files.StoredFileMissing as e:
        logger.error('Document %s has no stored file', document_id)
        raise errors.NotFound('File not found on server',
                              'FILE_NOT_FOUND') from e
    try:
        document = documents.record_download(document_id, principal.user_id)
    except Exception:
        stream.close()
        raise
    return document, stream


def add_annotation(principal: domain.Principal, document_id: int,
                   payload: Any) -> Response:
    payload = payload if isinstance(payload, dict) else {}
    form = validated(AnnotationForm, payload)
    check_types(payload, {'position': dict}, nullable=('position',))
    annotation = {
        'type': form.type.data,
        'content': form.content.data or None,
        'page': form.page.data,
        'position': payload.get('position'),
        'color': form.color.data or None,
    }
    try:
        document = documents.add_annotation(document_id, principal.user_id,
                                            annotation)
    except documents.NoSuchDocument as e:
        raise document_not_found() from e
    return {
        'message': 'Annotation added successfully',
        'document': document
    }, status.HTTP_201_CREATED, {}


def search(principal: domain.Principal, params: Any) -> Response:
    form = validated(TextSearchForm, params)
    found, pagination = documents.search(principal.user_id, form.q.data,
                                         page=form.page.data or 1,
                                         limit=form.limit.data or 10)
    return {
        'documents': found,
        'pagination': pagination,
        'searchQuery': form.q.data
    }, status.HTTP_200_OK, {}


def categories(principal: domain.Principal) -> Response:
    return {'categories': documents.categories(principal.user_id)}, \
        status.HTTP_200_OK, {}


def statistics(principal: domain.Principal) -> Response:
    return documents.statistics(principal.user_id), status.HTTP_200_OK, {}
