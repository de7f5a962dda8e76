"""
FormAI client SDK.

Talks to the embed API of a single forum. Every request carries the forum's
ID as the `forumId` query parameter and, when configured, the forum's API
key in the `X-API-Key` header.

Usage:
    async with ForumAI(forum_id, api_key="fai_...", base_url="https://formai.app") as forum:
        questions = await forum.get_recent_questions(limit=5)
"""
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from formai.sdk import widgets

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://formai.app"
EVENTS = ("question", "answer", "vote", "error")


class FormAIError(Exception):
    """Base error of the client SDK."""


class FormAIAPIKeyError(FormAIError):
    """A write was attempted without an API key."""

    def __init__(self, message: str = "API key is required for this operation"):
        super().__init__(message)


class FormAIRequestError(FormAIError):
    """The API answered with an error or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, path: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.path = path
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = {}
    if isinstance(data, dict):
        message = data.get("message") or data.get("detail")
        if message:
            return message if isinstance(message, str) else str(message)
    return f"HTTP error {response.status_code}"


class ForumAI:
    """Async client for the FormAI embed API."""

    def __init__(
        self,
        forum_id,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        if not forum_id:
            raise ValueError("ForumAI: forum_id is required")

        self.forum_id = str(forum_id)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.version: Optional[str] = None
        self._listeners: Dict[str, List[Callable]] = {event: [] for event in EVENTS}
        self.client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "ForumAI":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.aclose()

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        return headers

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def on(self, event: str, callback: Callable) -> "ForumAI":
        if event in self._listeners:
            self._listeners[event].append(callback)
        else:
            logger.warning(f"ForumAI: Unknown event type '{event}'")
        return self

    def off(self, event: str, callback: Callable) -> "ForumAI":
        if event in self._listeners:
            self._listeners[event] = [cb for cb in self._listeners[event] if cb != callback]
        return self

    def _emit(self, event: str, data: Any) -> None:
        for callback in list(self._listeners.get(event, [])):
            try:
                callback(data)
            except Exception:
                logger.exception(f"ForumAI: Error in {event} event listener")

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None
    ) -> Any:
        query = {key: value for key, value in (params or {}).items() if value is not None}
        query["forumId"] = self.forum_id

        try:
            response = await self.client.request(method, path, params=query, json=json, headers=self.headers)
        except httpx.HTTPError as e:
            message = str(e) or "Request failed"
            self._emit("error", {"type": "request", "path": path, "message": message})
            raise FormAIRequestError(message, path=path) from e

        if response.is_error:
            message = _error_message(response)
            self._emit("error", {"type": "request", "path": path, "message": message})
            raise FormAIRequestError(message, status_code=response.status_code, path=path)

        return response.json()

    def _require_api_key(self) -> None:
        if not self.api_key:
            raise FormAIAPIKeyError()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def check_version(self) -> dict:
        data = await self._request("GET", "/api/embed/version")
        self.version = data.get("version")
        return data

    async def get_forum(self) -> dict:
        return await self._request("GET", f"/api/embed/forum/{self.forum_id}")

    async def get_recent_questions(self, limit: int = 10, category_id=None) -> List[dict]:
        data = await self._request(
            "GET",
            "/api/embed/questions",
            params={"limit": limit, "type": "recent", "categoryId": category_id},
        )
        return data.get("questions", [])

    async def get_popular_questions(
        self,
        limit: int = 10,
        category_id=None,
        sort_by: str = "views",
        time_frame: int = 30
    ) -> List[dict]:
        data = await self._request(
            "GET",
            "/api/embed/questions",
            params={
                "limit": limit,
                "type": "popular",
                "sortBy": sort_by,
                "timeFrame": time_frame,
                "categoryId": category_id,
            },
        )
        return data.get("questions", [])

    async def get_categories(self) -> List[dict]:
        data = await self._request("GET", "/api/embed/categories")
        return data.get("categories", [])

    async def get_question(self, question_id) -> dict:
        return await self._request("GET", f"/api/embed/questions/{question_id}")

    async def get_answers(self, question_id, limit: int = 20, sort_by: str = "votes") -> List[dict]:
        data = await self._request(
            "GET",
            f"/api/embed/questions/{question_id}/answers",
            params={"limit": limit, "sortBy": sort_by},
        )
        return data.get("answers", [])

    async def search_questions(self, query: str, limit: int = 20) -> List[dict]:
        data = await self._request("GET", "/api/embed/search", params={"q": query, "limit": limit})
        return data.get("results", [])

    # -------------------------------------------------------------------------
    # Writes (API key required)
    # -------------------------------------------------------------------------

    async def ask_question(self, title: str, content: str, category_id=None, author_name: Optional[str] = None) -> dict:
        self._require_api_key()
        body = {"title": title, "content": content}
        if category_id:
            body["categoryId"] = str(category_id)
        if author_name:
            body["authorName"] = author_name
        question = await self._request("POST", "/api/embed/questions", json=body)
        self._emit("question", question)
        return question

    async def post_answer(self, question_id, content: str, author_name: Optional[str] = None) -> dict:
        self._require_api_key()
        body = {"content": content}
        if author_name:
            body["authorName"] = author_name
        answer = await self._request("POST", f"/api/embed/questions/{question_id}/answers", json=body)
        self._emit("answer", answer)
        return answer

    async def vote_answer(self, answer_id, is_upvote: bool = True) -> dict:
        self._require_api_key()
        vote = await self._request("POST", f"/api/embed/answers/{answer_id}/vote", json={"isUpvote": is_upvote})
        self._emit("vote", vote)
        return vote

    async def get_ai_answer_preview(self, title: str, content: str = "", persona_type: str = "expert") -> dict:
        return await self._request(
            "POST",
            "/api/embed/ai/answer-preview",
            json={"questionTitle": title, "questionContent": content, "personaType": persona_type},
        )

    # -------------------------------------------------------------------------
    # Widgets
    # -------------------------------------------------------------------------

    async def render_widget(self, widget_type: str = "questions", **options) -> str:
        """
        Render a widget as an HTML fragment.

        `questions` lists recent or popular questions, `ask` renders the
        question form and `search` renders a search box, with results when
        `query` is given.
        """
        theme = options.get("theme", "light")

        if widget_type == "questions":
            limit = options.get("limit", 5)
            category_id = options.get("category_id")
            if options.get("type") == "popular":
                questions = await self.get_popular_questions(limit=limit, category_id=category_id)
            else:
                questions = await self.get_recent_questions(limit=limit, category_id=category_id)
            return widgets.render_questions(
                questions,
                self.base_url,
                self.forum_id,
                title=options.get("title", "Recent Questions"),
                show_answer_count=options.get("show_answer_count", True),
                show_view_count=options.get("show_view_count", True),
                theme=theme,
            )

        if widget_type == "ask":
            try:
                categories = await self.get_categories()
            except FormAIRequestError:
                logger.warning("ForumAI: Failed to load categories")
                categories = []
            return widgets.render_ask(
                categories,
                title=options.get("title", "Ask a Question"),
                theme=theme,
                button_text=options.get("button_text", "Submit Question"),
                placeholder=options.get("placeholder", "What would you like to ask?"),
                show_ai_preview=options.get("show_ai_preview", False),
            )

        if widget_type == "search":
            query = options.get("query", "")
            results = await self.search_questions(query, limit=options.get("limit", 20)) if query else None
            return widgets.render_search(
                self.base_url,
                self.forum_id,
                query=query,
                results=results,
                title=options.get("title", "Search Questions"),
                theme=theme,
                placeholder=options.get("placeholder", "Search the forum..."),
            )

        raise ValueError(f"Unknown widget type: {widget_type}")
