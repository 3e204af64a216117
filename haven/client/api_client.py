"""
HTTP client for the chats API.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

import httpx

from haven.core.exceptions import HavenError
from haven.core.logger import setup_logger
from haven.models.analytics import StatisticsReport
from haven.models.conversation import AppendResult, Conversation, ConversationPage
from haven.models.enums import ChatMode, ExportFormat, SortField, SortOrder
from haven.models.history import MODE_ALL, HistoryPage

logger = setup_logger(__name__)

CHATS_PATH = "/api/chats"


class ApiError(HavenError):
    """Non-success response from the server."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[Any] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.code = code


def _error_from_response(response: httpx.Response) -> ApiError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return ApiError(response.status_code, "http_error", response.text or response.reason_phrase)
    return ApiError(
        response.status_code,
        error.get("code", "http_error"),
        error.get("message", ""),
        error.get("details"),
    )


def _params(**values: Any) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, datetime):
            value = value.isoformat()
        elif hasattr(value, "value"):
            value = value.value
        params[key] = value
    return params


class HavenApiClient:
    """Async client for /api/chats."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "HavenApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = await self._client.request(method, f"{CHATS_PATH}{path}", **kwargs)
        if response.is_error:
            error = _error_from_response(response)
            logger.warning(f"{method} {path} failed: {response.status_code} {error.code}")
            raise error
        return response

    async def get_welcome_message(self, mode: ChatMode | str) -> str:
        mode_value = mode.value if isinstance(mode, ChatMode) else mode
        response = await self._request("GET", f"/welcome/{mode_value}")
        return response.json()["welcome_message"]

    async def create_conversation(
        self,
        message: str,
        mode: ChatMode | str,
        sub_category: Optional[str] = None,
    ) -> Conversation:
        mode_value = mode.value if isinstance(mode, ChatMode) else mode
        response = await self._request(
            "POST",
            "",
            json={"message": message, "mode": mode_value, "sub_category": sub_category},
        )
        return Conversation.model_validate(response.json()["conversation"])

    async def send_message(self, conversation_id: UUID, message: str) -> AppendResult:
        response = await self._request(
            "POST",
            f"/{conversation_id}/messages",
            json={"message": message},
        )
        return AppendResult.model_validate(response.json())

    async def get_conversation(self, conversation_id: UUID) -> Conversation:
        response = await self._request("GET", f"/{conversation_id}")
        return Conversation.model_validate(response.json()["conversation"])

    async def list_conversations(
        self,
        mode: Optional[ChatMode | str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> ConversationPage:
        response = await self._request(
            "GET",
            "",
            params=_params(mode=mode, page=page, page_size=page_size),
        )
        body = response.json()
        pagination = body["pagination"]
        return ConversationPage(
            items=body["conversations"],
            total_count=pagination["total_count"],
            page=pagination["current_page"],
            page_size=pagination["page_size"],
        )

    async def get_history(
        self,
        mode: str = MODE_ALL,
        search: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        sort_by: SortField = SortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
        page: int = 1,
        page_size: int = 20,
    ) -> HistoryPage:
        response = await self._request(
            "GET",
            "/history",
            params=_params(
                mode=mode,
                search=search,
                date_from=date_from,
                date_to=date_to,
                sort_by=sort_by,
                sort_order=sort_order,
                page=page,
                page_size=page_size,
            ),
        )
        return HistoryPage.model_validate(response.json())

    async def get_statistics(self, period_days: int = 30) -> StatisticsReport:
        response = await self._request(
            "GET",
            "/statistics",
            params=_params(period_days=period_days),
        )
        return StatisticsReport.model_validate(response.json())

    async def toggle_bookmark(self, conversation_id: UUID) -> bool:
        response = await self._request("PATCH", f"/{conversation_id}/bookmark")
        return response.json()["is_bookmarked"]

    async def delete_conversation(self, conversation_id: UUID) -> dict[str, Any]:
        response = await self._request("DELETE", f"/{conversation_id}")
        return response.json()["deleted"]

    async def export_conversation(
        self,
        conversation_id: UUID,
        export_format: ExportFormat = ExportFormat.JSON,
    ) -> bytes:
        response = await self._request(
            "GET",
            f"/{conversation_id}/export",
            params=_params(format=export_format),
        )
        return response.content
