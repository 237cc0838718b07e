"""
Remote collection clients.

Two interchangeable clients talk to the authoritative store:

- ApiCollectionClient: the fleet REST API (``/api/{collection}[/{id}]``)
- SupabaseCollectionClient: a hosted PostgREST endpoint (``/rest/v1/{table}``)

Every call returns an explicit result instead of raising: ``Ok(value)`` on
success, ``RemoteFailure(reason, status_code)`` on a transport error, a
non-2xx response, an undecodable body, or a record that does not match the
collection schema. No caching and no retry happen here.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union
from urllib.parse import quote

import httpx
from jsonschema import ValidationError

from .config import Settings
from .ids import new_id
from .log import get_logger
from .validation import validate_record, validate_records

logger = get_logger(__name__)


@dataclass
class Ok:
    """A remote call that succeeded."""

    value: Any = None


@dataclass
class RemoteFailure:
    """A remote call that failed; the caller degrades to local-only."""

    reason: str
    status_code: Optional[int] = None


RemoteResult = Union[Ok, RemoteFailure]


class RemoteClient:
    """Interface consumed by SyncedCollection."""

    def list(self, collection: str) -> RemoteResult:
        raise NotImplementedError

    def create(self, collection: str, data: Dict[str, Any]) -> RemoteResult:
        raise NotImplementedError

    def update(self, collection: str, record_id: str, patch: Dict[str, Any]) -> RemoteResult:
        raise NotImplementedError

    def remove(self, collection: str, record_id: str) -> RemoteResult:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class HttpRemoteClient(RemoteClient):
    """Common plumbing for the httpx-based clients."""

    def __init__(self, client: httpx.Client):
        self._client = client

    def close(self) -> None:
        self._client.close()

    def _guard(self, action: str, collection: str, call: Callable[[], Any]) -> RemoteResult:
        """Run ``call`` and turn any failure into a RemoteFailure."""
        try:
            return Ok(call())
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("%s %s failed with HTTP %s", action, collection, status)
            return RemoteFailure(f"{action} {collection}: HTTP {status}", status)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", action, collection, e)
            return RemoteFailure(f"{action} {collection}: {e}")
        except ValidationError as e:
            logger.warning("%s %s returned an invalid record: %s", action, collection, e.message)
            return RemoteFailure(f"{action} {collection}: invalid record: {e.message}")
        except ValueError as e:
            logger.warning("%s %s returned malformed JSON: %s", action, collection, e)
            return RemoteFailure(f"{action} {collection}: malformed response")


def _record_path(collection: str, record_id: str) -> str:
    return f"api/{collection}/{quote(str(record_id), safe='')}"


class ApiCollectionClient(HttpRemoteClient):
    """Client for the fleet REST API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        super().__init__(
            httpx.Client(
                base_url=base_url,
                timeout=timeout,
                headers=headers,
                transport=transport,
            )
        )

    def list(self, collection: str) -> RemoteResult:
        def call():
            r = self._client.get(f"api/{collection}")
            r.raise_for_status()
            records = r.json() or []
            validate_records(collection, records)
            return records

        return self._guard("list", collection, call)

    def create(self, collection: str, data: Dict[str, Any]) -> RemoteResult:
        def call():
            r = self._client.post(f"api/{collection}", json=data)
            r.raise_for_status()
            record = r.json()
            validate_record(collection, record)
            return record

        return self._guard("create", collection, call)

    def update(self, collection: str, record_id: str, patch: Dict[str, Any]) -> RemoteResult:
        def call():
            r = self._client.put(_record_path(collection, record_id), json=patch)
            r.raise_for_status()
            record = r.json()
            validate_record(collection, record)
            return record

        return self._guard("update", collection, call)

    def remove(self, collection: str, record_id: str) -> RemoteResult:
        def call():
            r = self._client.delete(_record_path(collection, record_id))
            if r.status_code == 404:
                logger.info("remove %s/%s: already absent on server", collection, record_id)
                return True
            r.raise_for_status()
            return True

        return self._guard("remove", collection, call)


class SupabaseCollectionClient(HttpRemoteClient):
    """Client for a hosted Postgres exposed through PostgREST."""

    def __init__(
        self,
        url: str,
        key: str,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Prefer": "return=representation",
        }
        super().__init__(
            httpx.Client(
                base_url=f"{url.rstrip('/')}/rest/v1/",
                timeout=timeout,
                headers=headers,
                transport=transport,
            )
        )

    def list(self, collection: str) -> RemoteResult:
        def call():
            r = self._client.get(collection, params={"select": "*"})
            r.raise_for_status()
            records = r.json() or []
            validate_records(collection, records)
            return records

        return self._guard("list", collection, call)

    def create(self, collection: str, data: Dict[str, Any]) -> RemoteResult:
        def call():
            payload = {"id": new_id(), **data}
            r = self._client.post(collection, json=payload)
            r.raise_for_status()
            rows = r.json()
            record = rows[0] if isinstance(rows, list) and rows else payload
            validate_record(collection, record)
            return record

        return self._guard("create", collection, call)

    def update(self, collection: str, record_id: str, patch: Dict[str, Any]) -> RemoteResult:
        def call():
            r = self._client.patch(
                collection, params={"id": f"eq.{record_id}"}, json=patch
            )
            r.raise_for_status()
            rows = r.json()
            if not isinstance(rows, list) or not rows:
                raise httpx.HTTPStatusError(
                    f"No row {record_id} in {collection}",
                    request=r.request,
                    response=httpx.Response(404, request=r.request),
                )
            validate_record(collection, rows[0])
            return rows[0]

        return self._guard("update", collection, call)

    def remove(self, collection: str, record_id: str) -> RemoteResult:
        def call():
            r = self._client.delete(collection, params={"id": f"eq.{record_id}"})
            if r.status_code == 404:
                return True
            r.raise_for_status()
            return True

        return self._guard("remove", collection, call)


def make_remote(
    settings: Settings, transport: Optional[httpx.BaseTransport] = None
) -> RemoteClient:
    """Pick the Supabase client when it is configured, else the REST API client."""
    if settings.use_supabase:
        logger.debug("Using Supabase at %s", settings.supabase_url)
        return SupabaseCollectionClient(
            settings.supabase_url,
            settings.supabase_key,
            timeout=settings.timeout,
            transport=transport,
        )
    logger.debug("Using fleet API at %s", settings.api_base)
    return ApiCollectionClient(
        settings.api_base,
        timeout=settings.timeout,
        token=settings.api_token,
        transport=transport,
    )
