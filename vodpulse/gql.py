import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

GQL_URL = 'https://gql.twitch.tv/gql'
DEFAULT_CLIENT_ID = 'kimne78kx3ncx6brgo4mv6wki5h1ko'

TIMEOUT_SETTINGS = httpx.Timeout(30.0, connect=10.0)
CONNECTION_LIMITS = httpx.Limits(max_connections=10, max_keepalive_connections=8)

CALL_ATTEMPTS = 3
CALL_RETRY_DELAY = 0.5


class GqlError(Exception):
    """Raised when the GraphQL endpoint answers with something unusable."""


def build_headers(client_id: Optional[str] = None, auth_token: Optional[str] = None) -> Dict[str, str]:
    headers = {
        'Client-Id': client_id or DEFAULT_CLIENT_ID,
        'Content-Type': 'application/json',
    }
    if auth_token:
        headers['Authorization'] = f'OAuth {auth_token}'
    return headers


def create_shared_client(client_id: Optional[str] = None, auth_token: Optional[str] = None,
                         transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create a shared async client with connection pooling for all crawlers of a fetch."""
    return httpx.AsyncClient(
        headers=build_headers(client_id, auth_token),
        timeout=TIMEOUT_SETTINGS,
        limits=CONNECTION_LIMITS,
        transport=transport,
    )


def dig(data: Any, *keys: str) -> Any:
    """Follow nested object keys of a response payload.

    Returns None as soon as a level is missing or null, raises ``GqlError``
    when a level is present but not an object.
    """
    current = data
    for key in keys:
        if current is None:
            return None
        if not isinstance(current, dict):
            raise GqlError(f'Expected an object before {key!r}, got {type(current).__name__}')
        current = current.get(key)
    return current


async def post_query(client: httpx.AsyncClient, query: str, variables: Dict[str, Any],
                     operation_name: Optional[str] = None) -> Dict:
    """Run a single GraphQL request. Raises on any transport or payload failure."""
    payload = {'query': query, 'variables': variables}
    if operation_name:
        payload['operationName'] = operation_name

    response = await client.post(GQL_URL, json=payload)
    response.raise_for_status()

    try:
        data = response.json()
    except ValueError as e:
        raise GqlError(f'Response is not valid JSON: {e}') from e

    if not isinstance(data, dict):
        raise GqlError(f'Unexpected response type: {type(data).__name__}')
    errors = data.get('errors')
    if errors and not data.get('data'):
        if isinstance(errors, list):
            messages = '; '.join(str(err.get('message', err)) for err in errors if isinstance(err, dict))
        else:
            messages = ''
        raise GqlError(f'GraphQL errors: {messages or errors}')
    return data


async def call(client: httpx.AsyncClient, query: str, variables: Dict[str, Any],
               operation_name: Optional[str] = None,
               attempts: int = CALL_ATTEMPTS, delay: float = CALL_RETRY_DELAY) -> Dict:
    """Run a query with a bounded number of attempts.

    Returns an empty dict once every attempt has failed, so callers can treat
    a dead endpoint the same way as a response without the expected fields.
    """
    for attempt in range(1, attempts + 1):
        try:
            return await post_query(client, query, variables, operation_name)
        except (httpx.HTTPError, GqlError) as e:
            logging.warning(f'GraphQL call failed (attempt {attempt}/{attempts}): {e}')
            if attempt < attempts:
                await asyncio.sleep(delay)
    return {}
