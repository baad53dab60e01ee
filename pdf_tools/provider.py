# pdf_tools/provider.py
"""Gateway to the external conversion API (ConvertAPI)."""
import logging
from typing import Any, Dict, Protocol

import httpx

from .errors import DownloadError, ProviderError, ProviderNetworkError, ProviderTimeoutError
from .messages import message
from .models import ConversionRequest

logger = logging.getLogger(__name__)


class ConversionGateway(Protocol):
    async def submit(
        self,
        endpoint: str,
        conversion_path: str,
        request: ConversionRequest,
        timeout: float,
    ) -> Dict[str, Any]:
        """Send one conversion call and return the decoded JSON body.

        Raises ProviderError for a non-success status or unusable body,
        ProviderNetworkError for connection failures and
        ProviderTimeoutError when the transport times out.
        """

    async def open_result(self, url: str, timeout: float) -> httpx.Response:
        """Open a streaming GET on the converted artifact; the caller closes it."""


class ConvertApiGateway:
    def __init__(self, client: httpx.AsyncClient, secret: str) -> None:
        self._client = client
        self._secret = secret

    def build_form(self, request: ConversionRequest) -> Dict[str, str]:
        form: Dict[str, str] = {}
        # Word output needs text recognition across every page
        if request.output_format == "docx":
            form.update(
                {
                    "OCR": "true",
                    "TextRecognition": "true",
                    "FromPage": "1",
                    "ToPage": "0",
                }
            )
        return form

    async def submit(
        self,
        endpoint: str,
        conversion_path: str,
        request: ConversionRequest,
        timeout: float,
    ) -> Dict[str, Any]:
        url = f"{endpoint}/convert/{conversion_path}"
        # secret stays out of the request URL
        headers = {"Authorization": f"Bearer {self._secret}"}
        params = {
            "StoreFile": "true",
            "Timeout": str(int(timeout)),
        }
        source = request.source
        files = {"File": (source.filename, source.data, source.content_type)}

        try:
            r = await self._client.post(
                url,
                params=params,
                headers=headers,
                data=self.build_form(request),
                files=files,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(f"Request to {endpoint} timed out") from e
        except httpx.HTTPError as e:
            raise ProviderNetworkError(f"{type(e).__name__}: {e}") from e

        logger.info("Provider %s answered %s for %s", endpoint, r.status_code, conversion_path)

        if r.status_code == 415:
            logger.error("Provider rejected media type: %s", r.text[:500])
            raise ProviderError(f"Unsupported Media Type (415): {r.text[:500]}", status=415)
        if r.status_code >= 400:
            raise ProviderError(f"HTTP error! status: {r.status_code}", status=r.status_code)

        try:
            return r.json()
        except ValueError as e:
            raise ProviderError("Invalid JSON in provider response", status=r.status_code) from e

    async def open_result(self, url: str, timeout: float) -> httpx.Response:
        req = self._client.build_request("GET", url, timeout=timeout)
        try:
            r = await self._client.send(req, stream=True)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError("Result download timed out") from e
        except httpx.HTTPError as e:
            raise DownloadError(f"{message('download_failed')}: {e}") from e

        if r.status_code >= 400:
            await r.aclose()
            raise DownloadError(message("download_failed"), status=r.status_code)
        return r
