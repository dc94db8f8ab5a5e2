"""Text unit search collaborator.

The search service is the authority on which text units belong to a branch
and on their translation state. TextUnitSearcher is the interface the
reconciler consumes; HttpTextUnitSearcher talks to the service over HTTP.

Endpoints:
    GET /api/textunits        -> [TextUnitDTO, ...]  (paged via limit/offset)
    GET /api/textunits/count  -> {"textUnitCount": n, "textUnitWordCount": m}
"""

from __future__ import annotations

import dataclasses
import json
from typing import TYPE_CHECKING, Any, Protocol

import httpx
import structlog
from pydantic import ValidationError

from l10nsync.core.errors import SearchError
from l10nsync.search.models import TextUnitAndWordCount, TextUnitDTO, TextUnitSearcherParameters

if TYPE_CHECKING:
    from l10nsync.config.models import SearchConfig

logger = structlog.get_logger()

SEARCH_PATH = "/api/textunits"
COUNT_PATH = "/api/textunits/count"


class TextUnitSearcher(Protocol):
    def search(self, params: TextUnitSearcherParameters) -> list[TextUnitDTO]: ...

    def count_text_unit_and_word_count(
        self, params: TextUnitSearcherParameters
    ) -> TextUnitAndWordCount: ...


class HttpTextUnitSearcher:
    """TextUnitSearcher backed by the search service REST API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        page_size: int = 1000,
        max_ids_per_request: int = 200,
        auth_token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"
        self.page_size = page_size
        self.max_ids_per_request = max_ids_per_request
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, config: SearchConfig, transport: httpx.BaseTransport | None = None
    ) -> HttpTextUnitSearcher:
        return cls(
            config.base_url,
            timeout=config.timeout_sec,
            page_size=config.page_size,
            max_ids_per_request=config.max_ids_per_request,
            auth_token=config.auth_token,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpTextUnitSearcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def search(self, params: TextUnitSearcherParameters) -> list[TextUnitDTO]:
        """Fetch every page of matching text units.

        An id filter longer than max_ids_per_request is split across queries,
        each paged on its own. Pages are requested until one comes back
        shorter than page_size. Pages can overlap if the underlying data
        shifts between requests, so callers must not assume the result is
        free of duplicate ids.
        """
        ids = params.tm_text_unit_ids
        size = self.max_ids_per_request
        if len(ids) <= size:
            return self._search_pages(params)

        chunks = [ids[i : i + size] for i in range(0, len(ids), size)]
        results: list[TextUnitDTO] = []
        for chunk in chunks:
            results.extend(self._search_pages(dataclasses.replace(params, tm_text_unit_ids=chunk)))
        logger.debug("text_unit_ids_chunked", ids=len(ids), chunks=len(chunks))
        return results

    def _search_pages(self, params: TextUnitSearcherParameters) -> list[TextUnitDTO]:
        results: list[TextUnitDTO] = []
        offset = params.offset or 0

        while True:
            page_params = dataclasses.replace(params, limit=self.page_size, offset=offset)
            payload = self._get_json(SEARCH_PATH, page_params)
            if not isinstance(payload, list):
                raise SearchError.bad_response(SEARCH_PATH, "expected a JSON array")
            try:
                page = [TextUnitDTO.model_validate(item) for item in payload]
            except ValidationError as e:
                raise SearchError.bad_response(SEARCH_PATH, str(e)) from e

            results.extend(page)
            if len(page) < self.page_size:
                break
            offset += self.page_size

        logger.debug("text_units_searched", count=len(results), pages=offset // self.page_size + 1)
        return results

    def count_text_unit_and_word_count(
        self, params: TextUnitSearcherParameters
    ) -> TextUnitAndWordCount:
        payload = self._get_json(COUNT_PATH, params)
        try:
            return TextUnitAndWordCount.model_validate(payload)
        except ValidationError as e:
            raise SearchError.bad_response(COUNT_PATH, str(e)) from e

    def _get_json(self, path: str, params: TextUnitSearcherParameters) -> Any:
        try:
            response = self._client.get(path, params=params.to_query_params())
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status >= 500:
                raise SearchError.unavailable(path, f"HTTP {status}") from e
            raise SearchError.bad_response(path, f"HTTP {status}", status_code=status) from e
        except httpx.RequestError as e:
            raise SearchError.unavailable(path, str(e)) from e
        except json.JSONDecodeError as e:
            raise SearchError.bad_response(path, f"invalid JSON: {e}") from e
