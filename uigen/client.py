# uigen/client.py
"""
Async Python client for the UIGen API.

    async with UIGenClient("http://localhost:3001") as client:
        project = await client.create_project("Landing page")
        await client.create_file(project["id"], "App.vue", "<template/>")
"""
from typing import Any, Dict, List, Optional

import httpx

from uigen.core.exceptions import UIGenError
from uigen.lib.api_utils import (
    API_ENDPOINTS,
    build_api_headers,
    build_api_url,
    format_api_error,
    is_api_success,
    replace_url_params,
)


class APIClientError(UIGenError):
    """A request to the UIGen API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, {"statusCode": status_code} if status_code else None)
        self.status_code = status_code or 500


class UIGenClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> "UIGenClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
    ) -> Any:
        if params:
            endpoint = replace_url_params(endpoint, params)
        url = build_api_url(endpoint, base_url=self.base_url)
        response = await self._client.request(method, url, json=json, headers=build_api_headers())
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise APIClientError(format_api_error(e), response.status_code) from e
        return response.json()

    @staticmethod
    def _unwrap(body: Dict[str, Any]) -> Any:
        """AI routes wrap results as {success, data, message}."""
        if not body.get("success"):
            raise APIClientError(body.get("message") or format_api_error(None))
        return body.get("data")

    # ------------------------------------------------------------------
    # PROJECTS
    # ------------------------------------------------------------------

    async def list_projects(self) -> List[Dict[str, Any]]:
        return await self._request("GET", API_ENDPOINTS["PROJECTS"]["LIST"])

    async def create_project(self, name: str, description: Optional[str] = None) -> Dict[str, Any]:
        payload = {"name": name}
        if description is not None:
            payload["description"] = description
        return await self._request("POST", API_ENDPOINTS["PROJECTS"]["CREATE"], json=payload)

    async def get_project(self, project_id: str) -> Dict[str, Any]:
        return await self._request("GET", API_ENDPOINTS["PROJECTS"]["GET"], {"id": project_id})

    async def update_project(self, project_id: str, **changes: Any) -> Dict[str, Any]:
        return await self._request("PUT", API_ENDPOINTS["PROJECTS"]["UPDATE"], {"id": project_id}, json=changes)

    async def delete_project(self, project_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", API_ENDPOINTS["PROJECTS"]["DELETE"], {"id": project_id})

    async def export_project(self, project_id: str) -> Dict[str, Any]:
        return await self._request("POST", API_ENDPOINTS["PROJECTS"]["EXPORT"], {"id": project_id})

    # ------------------------------------------------------------------
    # FILES
    # ------------------------------------------------------------------

    async def list_files(self, project_id: str) -> List[Dict[str, Any]]:
        return await self._request("GET", API_ENDPOINTS["FILES"]["LIST"], {"projectId": project_id})

    async def create_file(self, project_id: str, name: str, content: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            API_ENDPOINTS["FILES"]["CREATE"],
            {"projectId": project_id},
            json={"name": name, "content": content},
        )

    async def get_file(self, project_id: str, file_id: str) -> Dict[str, Any]:
        return await self._request("GET", API_ENDPOINTS["FILES"]["GET"], {"projectId": project_id, "fileId": file_id})

    async def update_file(self, project_id: str, file_id: str, content: str) -> Dict[str, Any]:
        return await self._request(
            "PUT",
            API_ENDPOINTS["FILES"]["UPDATE"],
            {"projectId": project_id, "fileId": file_id},
            json={"content": content},
        )

    async def delete_file(self, project_id: str, file_id: str) -> Dict[str, Any]:
        return await self._request(
            "DELETE", API_ENDPOINTS["FILES"]["DELETE"], {"projectId": project_id, "fileId": file_id}
        )

    # ------------------------------------------------------------------
    # AI
    # ------------------------------------------------------------------

    async def chat(
        self,
        messages: List[Dict[str, str]],
        provider: Optional[str] = None,
        project_id: Optional[str] = None,
        use_tools: bool = False,
        options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"messages": messages, "useTools": use_tools}
        if provider:
            payload["provider"] = provider
        if project_id:
            payload["projectId"] = project_id
        if options:
            payload["options"] = options
        return self._unwrap(await self._request("POST", API_ENDPOINTS["AI"]["CHAT"], json=payload))

    async def get_providers(self) -> Dict[str, Any]:
        return self._unwrap(await self._request("GET", API_ENDPOINTS["AI"]["PROVIDERS"]))

    async def get_usage(self) -> Dict[str, Any]:
        return self._unwrap(await self._request("GET", API_ENDPOINTS["AI"]["USAGE"]))

    async def health(self) -> Dict[str, Any]:
        """Server liveness; lives outside the versioned prefix."""
        base = (self.base_url or build_api_url("").split("/api/")[0]).rstrip("/")
        response = await self._client.get(f"{base}/health")
        if not is_api_success(response.status_code):
            raise APIClientError(f"Health check failed with status {response.status_code}", response.status_code)
        return response.json()
