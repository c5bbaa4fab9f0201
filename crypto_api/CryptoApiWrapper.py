import asyncio
import json
import logging
from http import HTTPStatus

import aiohttp

from exceptions.gateway import GatewayUnavailableException

logger = logging.getLogger(__name__)


class CryptoApiWrapper:
    """
    Thin aiohttp wrapper for payment gateway HTTP calls.

    Every failure mode (connection error, timeout, non-2xx status, body that
    is not a JSON object) is raised as GatewayUnavailableException, never
    returned as data.
    """

    @staticmethod
    async def fetch_api_request(
        url: str,
        operation: str,
        params: dict | None = None,
        method: str = "GET",
        data: str | None = None,
        headers: dict | None = None,
        timeout_seconds: float = 10.0
    ) -> dict:
        timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, params=params, data=data, headers=headers) as response:
                    if not HTTPStatus.OK <= response.status < HTTPStatus.MULTIPLE_CHOICES:
                        logger.warning(f"Gateway {operation} answered HTTP {response.status}")
                        raise GatewayUnavailableException(operation, f"HTTP {response.status}")
                    # Gateways often send JSON as text/html, so skip the content-type check
                    body = await response.json(content_type=None)
        except asyncio.TimeoutError:
            logger.warning(f"Gateway {operation} timed out after {timeout_seconds}s")
            raise GatewayUnavailableException(operation, f"timeout after {timeout_seconds}s")
        except aiohttp.ClientError as e:
            logger.warning(f"Gateway {operation} request failed: {e.__class__.__name__}")
            raise GatewayUnavailableException(operation, e.__class__.__name__)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning(f"Gateway {operation} returned a non-JSON body")
            raise GatewayUnavailableException(operation, "malformed response body")

        if not isinstance(body, dict):
            raise GatewayUnavailableException(operation, "unexpected response shape")
        return body
