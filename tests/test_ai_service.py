"""
Tests for the AI content service with fake providers.
"""
import json
from types import SimpleNamespace

from formai.config import settings
from formai.services.ai_service import (
    AIContentService,
    FALLBACK_ANSWER,
    normalize_difficulty,
    normalize_interlink_suggestions,
    strip_code_fences,
)


class FakeOpenAI:
    """Minimal stand-in for openai.OpenAI with chat completions."""

    def __init__(self, reply: str):
        self.reply = reply
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences("```\nplain\n```") == "plain"
    assert strip_code_fences("  no fences  ") == "no fences"
    assert strip_code_fences(None) == ""


def test_normalize_difficulty():
    assert normalize_difficulty("Easy") == "beginner"
    assert normalize_difficulty(" moderate ") == "intermediate"
    assert normalize_difficulty("ADVANCED") == "expert"
    assert normalize_difficulty(None) == "intermediate"
    assert normalize_difficulty("impossible") == "intermediate"


def test_normalize_interlink_suggestions():
    payload = {"interlinkingSuggestions": [
        {"contentId": "a", "contentType": "question", "anchorText": "custom domains", "relevanceScore": 72},
        {"content_id": "b", "content_type": "main_page", "anchor_text": "pricing", "relevance_score": "95.4",
         "explanation": "Mentions plans"},
        {"contentId": "c", "contentType": "question", "anchorText": "too weak", "relevanceScore": 49},
        {"contentId": "d", "contentType": "video", "anchorText": "wrong type", "relevanceScore": 90},
        {"contentId": "e", "contentType": "answer", "anchorText": "  ", "relevanceScore": 90},
        {"contentId": "zz", "contentType": "answer", "anchorText": "unknown id", "relevanceScore": 90},
        "not a dict",
    ]}

    suggestions = normalize_interlink_suggestions(payload, valid_ids={"a", "b", "c", "d", "e"})

    assert [(s["content_id"], s["relevance_score"]) for s in suggestions] == [("b", 95), ("a", 72)]
    assert suggestions[0]["reason"] == "Mentions plans"
    assert suggestions[1]["title"] == ""


def test_normalize_interlink_suggestions_bare_list_and_limit():
    items = [
        {"id": str(i), "type": "answer", "anchorText": f"link {i}", "score": 60 + i}
        for i in range(8)
    ]
    suggestions = normalize_interlink_suggestions(items, limit=3)
    assert [s["content_id"] for s in suggestions] == ["7", "6", "5"]


def test_unconfigured_service_returns_fallbacks():
    service = AIContentService(client=None)

    assert service.is_configured is False
    assert service.generate_answer("Title here", "body") == FALLBACK_ANSWER
    assert service.generate_seo_questions("dns") == []
    assert service.analyze_question_seo("Title", "body")["seo_score"] == 0
    assert service.keyword_difficulty(["dns"]) == [
        {"keyword": "dns", "difficulty": None, "search_volume": None, "intent": "unknown"},
    ]


def test_generate_answer_uses_persona_prompt(ai, fake_ai):
    fake_ai.queue("```\nUse a CNAME record.\n```")
    persona = SimpleNamespace(
        name="Mod Molly",
        description="Keeps the community friendly",
        personality="warm",
        tone="casual",
        expertise_areas=[],
        response_length=2,
    )

    answer = ai.generate_answer("How do I add a domain?", "", "moderator", persona)

    assert answer == "Use a CNAME record."
    prompt = fake_ai.prompts[0]
    assert "community moderator" in prompt
    assert "Your name is Mod Molly." in prompt
    assert "Areas of expertise" not in prompt
    assert "(no details given)" in prompt


def test_generate_answer_falls_back_on_error(ai, fake_ai):
    fake_ai.queue(RuntimeError("provider down"))
    assert ai.generate_answer("How do I add a domain?", "details") == FALLBACK_ANSWER


def test_rate_limit_is_retried(ai, fake_ai, monkeypatch):
    monkeypatch.setattr(settings, "AI_MAX_RETRIES", 2)
    monkeypatch.setattr(settings, "AI_RETRY_DELAY_SECONDS", 0)
    fake_ai.queue(RuntimeError("429 quota exceeded"), "Second try worked.")

    assert ai.generate_answer("How do I add a domain?", "details") == "Second try worked."
    assert len(fake_ai.prompts) == 2


def test_other_errors_are_not_retried(ai, fake_ai, monkeypatch):
    monkeypatch.setattr(settings, "AI_MAX_RETRIES", 3)
    fake_ai.queue(ValueError("bad request"), "never used")

    assert ai.generate_answer("How do I add a domain?", "details") == FALLBACK_ANSWER
    assert len(fake_ai.prompts) == 1


def test_seo_questions_filters_incomplete_items(ai, fake_ai):
    fake_ai.queue(json.dumps({"questions": [
        {"title": "Why", "content": "too short a title"},
        {"title": "How do I reset my password?", "content": ""},
        {"title": "Can I export my data?", "content": "We are moving to another tool."},
    ]}))

    assert ai.generate_seo_questions("accounts", count=5) == [
        {"title": "Can I export my data?", "content": "We are moving to another tool."},
    ]


def test_seo_questions_invalid_json(ai, fake_ai):
    fake_ai.queue("Sure! Here are some questions.")
    assert ai.generate_seo_questions("accounts") == []


def test_analyze_question_seo_clamps_score(ai, fake_ai):
    fake_ai.queue(json.dumps({"primary_keywords": ["dns"], "seo_score": 250, "suggested_tags": "dns"}))

    result = ai.analyze_question_seo("DNS help", "My records do not resolve.")

    assert result["seo_score"] == 100
    assert result["primary_keywords"] == ["dns"]
    assert result["suggested_tags"] == []


def test_keyword_difficulty_keeps_requested_order(ai, fake_ai):
    fake_ai.queue(json.dumps({"keywords": [
        {"keyword": "forum seo", "difficulty": 35.6, "search_volume": "lots"},
    ]}))

    rows = ai.keyword_difficulty(["custom domain", "Forum SEO"])

    assert rows == [
        {"keyword": "custom domain", "difficulty": None, "search_volume": None, "intent": "unknown"},
        {"keyword": "Forum SEO", "difficulty": 36, "search_volume": None, "intent": "unknown"},
    ]


def test_openai_provider_requests_json():
    client = FakeOpenAI('{"strengths": ["Fast"], "summary": "Quick site."}')
    service = AIContentService(client=client, provider="openai")

    result = service.analyze_competitor({"name": "Globex", "domain": "globex.com"})

    assert result == {"strengths": ["Fast"], "weaknesses": [], "keyword_opportunities": [], "summary": "Quick site."}
    call = client.calls[0]
    assert call["response_format"] == {"type": "json_object"}
    assert call["model"] == settings.AI_MODEL
    assert "globex.com" in call["messages"][0]["content"]


def test_openai_answer_has_no_json_mode():
    client = FakeOpenAI("Plain markdown answer.")
    service = AIContentService(client=client, provider="openai")

    assert service.generate_answer("How do I add a domain?", "details", "beginner") == "Plain markdown answer."
    call = client.calls[0]
    assert "response_format" not in call
    assert call["max_tokens"] == 300
