"""
REST API endpoints for KeyObject records.

Every route takes an optional `domain` query parameter; without it the
server's configured root domain is used. Record ids may contain `/` and `::`.
"""
from typing import Any, List, Optional

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import BaseModel, Field

from keyobject_lib.server.health import get_health
from keyobject_lib.services.resolver import resolve_service
from keyobject_lib.store import KeyObjectStore

import logging
router = APIRouter()
logger = logging.getLogger(__name__)

_MISSING = object()


class RecordPayload(BaseModel):
    id: str
    data: Any = None


class CopyPayload(BaseModel):
    from_id: str = ''
    to_id: str = ''
    value_if_null: Any = None


class LookupPayload(BaseModel):
    ids: List[str] = Field(default_factory=list)


def _store_for(request: Request, domain: Optional[str]) -> KeyObjectStore:
    root = resolve_service(request, 'store')
    if domain is None or domain == root.domain:
        return root
    return KeyObjectStore(domain, root.database, root.table_name)


def _server_error(action: str, e: Exception) -> HTTPException:
    logger.error("Error during %s: %s", action, e, exc_info=True)
    return HTTPException(status_code=500, detail=str(e))


@router.get('/health')
async def api_health(request: Request):
    database = resolve_service(request, 'database')
    return get_health(backend=type(database).__name__)


@router.get('/records')
async def api_records_list(request: Request, domain: Optional[str] = None,
                           prefix: Optional[str] = None, suffix: Optional[str] = None):
    """
    List records of a domain.

    Query params:
        domain: domain to scan (optional)
        prefix: id prefix, qualified with the domain unless it already is
        suffix: verbatim id suffix; takes precedence over `prefix`

    Returns a list of {"id", "data"} objects.
    """
    store = _store_for(request, domain)
    try:
        if suffix is not None:
            return await store.get_where_id_ends_with(suffix)
        return await store.get_where_id_starts_with(prefix or '')
    except Exception as e:
        raise _server_error('records list', e)


@router.post('/records/lookup')
async def api_records_lookup(request: Request, payload: LookupPayload):
    """Batch lookup by stored (already qualified) ids."""
    store = _store_for(request, None)
    try:
        return await store.get_list(payload.ids)
    except Exception as e:
        raise _server_error('records lookup', e)


@router.post('/records/bulk')
async def api_records_bulk(request: Request, payload: List[RecordPayload], domain: Optional[str] = None):
    store = _store_for(request, domain)
    records = [{'id': r.id, 'data': r.data} for r in payload]
    try:
        await store.set_bulk(records)
    except Exception as e:
        raise _server_error('records bulk set', e)
    return {'ok': True, 'ids': [r['id'] for r in records]}


@router.post('/records/copy')
async def api_records_copy(request: Request, payload: CopyPayload, domain: Optional[str] = None):
    store = _store_for(request, domain)
    try:
        if "value_if_null" in payload.model_fields_set:
            await store.copy(payload.from_id, payload.to_id, payload.value_if_null)
        else:
            await store.copy(payload.from_id, payload.to_id)
    except Exception as e:
        raise _server_error('records copy', e)
    return {'ok': True, 'from_id': store.define_id(payload.from_id), 'to_id': store.define_id(payload.to_id)}


@router.get('/records/{record_id:path}')
async def api_record_get(request: Request, record_id: str, domain: Optional[str] = None):
    store = _store_for(request, domain)
    try:
        value = await store.get(record_id, _MISSING)
    except Exception as e:
        raise _server_error('record get', e)
    if value is _MISSING:
        raise HTTPException(status_code=404, detail='Record not found')
    return value


@router.put('/records/{record_id:path}')
async def api_record_put(request: Request, record_id: str, domain: Optional[str] = None,
                         data: Any = Body(default=None)):
    store = _store_for(request, domain)
    logger.debug("Saving record %s in domain %s", record_id, store.domain)
    try:
        return await store.set(record_id, data)
    except Exception as e:
        raise _server_error('record set', e)


@router.delete('/records/{record_id:path}')
async def api_record_delete(request: Request, record_id: str, domain: Optional[str] = None):
    store = _store_for(request, domain)
    try:
        await store.delete(record_id)
    except Exception as e:
        raise _server_error('record delete', e)
    return {'ok': True, 'id': store.define_id(record_id)}
