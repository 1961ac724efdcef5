from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Protocol

from aiohttp import ClientError
from gql import Client, gql
from gql.transport.aiohttp import AIOHTTPTransport
from gql.transport.exceptions import TransportError, TransportQueryError

from ..errors import GraphQLRequestError
from .endpoints import VenmoEndpoints


logger = logging.getLogger(__name__)


class GraphQLExecutor(Protocol):
    async def execute(
        self,
        operation: str,
        query: str,
        *,
        variables: Optional[Mapping[str, Any]] = None,
        headers: Mapping[str, str],
    ) -> Dict[str, Any]: ...


class GraphQLClient:
    """
    Thin `gql` wrapper. A fresh transport per call because headers (bearer token) are per call.
    """

    def __init__(self, *, url: str = VenmoEndpoints.graphql(), timeout: int = 30) -> None:
        self._url = url
        self._timeout = timeout

    async def execute(
        self,
        operation: str,
        query: str,
        *,
        variables: Optional[Mapping[str, Any]] = None,
        headers: Mapping[str, str],
    ) -> Dict[str, Any]:
        transport = AIOHTTPTransport(url=self._url, headers=dict(headers), timeout=self._timeout)
        client = Client(
            transport=transport,
            fetch_schema_from_transport=False,
            execute_timeout=self._timeout,
        )
        try:
            return await client.execute_async(
                gql(query),
                operation_name=operation,
                variable_values=dict(variables or {}),
            )
        except TransportQueryError as e:
            # GraphQL-level errors (HTTP 200 with an `errors` array).
            raise GraphQLRequestError(operation, str(e.errors or e)) from e
        except (TransportError, ClientError, asyncio.TimeoutError) as e:
            raise GraphQLRequestError(operation, f"{type(e).__name__}: {e}") from e
