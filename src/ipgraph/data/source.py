"""
Relationship sources.

The upstream asset-data service is an external collaborator. The engine
only depends on the ``RelationshipSource`` protocol; transports live with
whoever wires the engine into an application.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, ValidationError

from ..core.types import RelationsResponse

logger = logging.getLogger(__name__)


class RelationshipFetchError(Exception):
    """
    Raised when relationship data for an asset cannot be obtained.

    Network failures, timeouts, rate limits, server errors and malformed
    payloads all end up as this one error kind.

    Attributes:
        asset_id: Asset whose relationships were requested.
        message: Human-readable error message.
    """

    def __init__(self, asset_id: str, message: str):
        self.asset_id = asset_id
        self.message = message
        super().__init__(message)


class FetchOptions(BaseModel):
    """Options forwarded to the upstream service. Part of the cache key."""
    max_depth: int = 2
    include_disputes: bool = False
    include_siblings: bool = False

    model_config = ConfigDict(frozen=True)


@runtime_checkable
class RelationshipSource(Protocol):
    async def fetch_relationships(
        self, asset_id: str, options: FetchOptions
    ) -> Union[RelationsResponse, Mapping[str, Any]]:
        ...


def coerce_response(asset_id: str, payload: Any) -> RelationsResponse:
    """
    Validate an upstream payload, substituting defaults for missing fields.

    A missing root falls back to a placeholder for ``asset_id``. Payloads
    that are not objects at all, or whose fields have the wrong shape, raise
    RelationshipFetchError.
    """
    if isinstance(payload, RelationsResponse):
        return payload
    if not isinstance(payload, Mapping):
        raise RelationshipFetchError(
            asset_id, f"Malformed relationship payload for {asset_id}: expected an object"
        )

    data: Dict[str, Any] = dict(payload)
    if not data.get("root"):
        logger.warning(f"Relationship payload for {asset_id} has no root; using placeholder")
        data["root"] = {"ipId": asset_id}
    elif isinstance(data["root"], Mapping) and not (data["root"].get("ipId") or data["root"].get("ip_id")):
        data["root"] = {**data["root"], "ipId": asset_id}

    try:
        return RelationsResponse.model_validate(data)
    except ValidationError as e:
        raise RelationshipFetchError(
            asset_id, f"Malformed relationship payload for {asset_id}: {e.error_count()} invalid field(s)"
        ) from e


class StaticRelationshipSource:
    """
    Serves relationship payloads from memory.

    Useful for tests, demos and the inspection CLI. Unknown assets raise
    RelationshipFetchError like a 404 from a real service would.
    """

    def __init__(self, payloads: Optional[Mapping[str, Any]] = None):
        self._payloads: Dict[str, Any] = dict(payloads or {})
        self.calls = 0

    def add(self, asset_id: str, payload: Any) -> None:
        self._payloads[asset_id] = payload

    async def fetch_relationships(self, asset_id: str, options: FetchOptions) -> Any:
        self.calls += 1
        if asset_id not in self._payloads:
            raise RelationshipFetchError(asset_id, f"Failed to fetch root IP {asset_id}")
        payload = copy.deepcopy(self._payloads[asset_id])
        if isinstance(payload, Mapping) and not options.include_disputes:
            payload = {**payload, "disputed": []}
        return payload
