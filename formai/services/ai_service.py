from openai import OpenAI, RateLimitError
import google.generativeai as genai
from formai.config import settings
from formai.models.persona import PERSONA_TYPES
import logging
import json
import time

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = "Sorry, I couldn't generate an answer at this time."

PERSONA_INSTRUCTIONS = {
    "beginner": (
        "You are a curious newcomer to this topic. Answer in plain, friendly language, "
        "avoid jargon, share what worked for you and admit what you are unsure about."
    ),
    "intermediate": (
        "You are a practitioner with a few years of hands-on experience. Give practical, "
        "step-by-step advice with concrete examples and mention common pitfalls."
    ),
    "expert": (
        "You are a recognised expert in this field. Give an authoritative, accurate and "
        "thorough answer, explain the reasoning behind each recommendation and cite "
        "best practices where relevant."
    ),
    "moderator": (
        "You are the community moderator. Answer helpfully and neutrally, summarise the "
        "key points, point to related discussions and keep the tone welcoming."
    ),
}

# Output length per persona type
MAX_TOKENS = {"expert": 1000, "beginner": 300}
DEFAULT_MAX_TOKENS = 600

INTERLINK_TYPES = ("question", "answer", "main_page")
MIN_INTERLINK_SCORE = 50

DIFFICULTY_ALIASES = {
    "easy": "beginner",
    "beginner": "beginner",
    "basic": "beginner",
    "medium": "intermediate",
    "intermediate": "intermediate",
    "moderate": "intermediate",
    "hard": "expert",
    "advanced": "expert",
    "expert": "expert",
}


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block from a model reply."""
    text = (text or "").strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def _as_list(value) -> list:
    if isinstance(value, list):
        return value
    return []


def _clamp(value, low: int, high: int, default: int) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def normalize_difficulty(value) -> str:
    return DIFFICULTY_ALIASES.get(str(value or "").strip().lower(), "intermediate")


def normalize_interlink_suggestions(payload, valid_ids=None, limit: int = 5) -> list:
    """
    Normalise an interlinking reply into a sorted list of suggestions.

    Accepts {"suggestions": [...]}, {"interlinkingSuggestions": [...]} or a bare
    list. Items without an id or anchor text, scoring under 50 or with an
    unknown content type are dropped.
    """
    if isinstance(payload, dict):
        items = payload.get("suggestions") or payload.get("interlinkingSuggestions") or []
    else:
        items = payload
    suggestions = []
    for item in _as_list(items):
        if not isinstance(item, dict):
            continue
        content_id = item.get("contentId") or item.get("content_id") or item.get("id")
        anchor = (item.get("anchorText") or item.get("anchor_text") or "").strip()
        content_type = item.get("contentType") or item.get("content_type") or item.get("type")
        score = _clamp(
            item.get("relevanceScore", item.get("relevance_score", item.get("score"))),
            0, 100, 0,
        )
        if not content_id or not anchor:
            continue
        if valid_ids is not None and str(content_id) not in valid_ids:
            continue
        if content_type not in INTERLINK_TYPES or score < MIN_INTERLINK_SCORE:
            continue
        suggestions.append({
            "content_id": str(content_id),
            "content_type": content_type,
            "title": item.get("title") or "",
            "anchor_text": anchor,
            "relevance_score": score,
            "reason": item.get("reason") or item.get("explanation") or "",
        })
    suggestions.sort(key=lambda s: s["relevance_score"], reverse=True)
    return suggestions[:limit]


class AIContentService:
    def __init__(self, client=None, provider: str = None):
        self.provider = provider or "openai"
        self.client = client
        self.model = settings.AI_MODEL
        if client is not None:
            return

        # Gemini is preferred when configured
        if settings.GEMINI_API_KEY:
            try:
                genai.configure(api_key=settings.GEMINI_API_KEY)
                self.client = genai.GenerativeModel(settings.GEMINI_MODEL)
                self.provider = "gemini"
                self.model = settings.GEMINI_MODEL
                logger.info("AI Service initialized with Gemini")
            except Exception as e:
                logger.error(f"Failed to initialize Gemini: {e}")

        if not self.client and settings.OPENAI_API_KEY:
            try:
                self.client = OpenAI(api_key=settings.OPENAI_API_KEY)
                self.provider = "openai"
                logger.info("AI Service initialized with OpenAI")
            except Exception as e:
                logger.error(f"Failed to initialize OpenAI: {e}")

        if not self.client:
            logger.warning("No AI provider configured, AI features will return fallbacks")

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def _is_rate_limit(self, error: Exception) -> bool:
        if isinstance(error, RateLimitError):
            return True
        message = str(error).lower()
        return "429" in message or "quota" in message or "rate limit" in message

    def _call_provider(self, prompt: str, json_mode: bool, temperature: float, max_tokens: int = None) -> str:
        if self.provider == "gemini":
            config = {"temperature": temperature}
            if max_tokens:
                config["max_output_tokens"] = max_tokens
            response = self.client.generate_content(prompt, generation_config=config)
            return response.text

        kwargs = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        response = self.client.chat.completions.create(**kwargs)
        return response.choices[0].message.content

    def _generate_content(
        self,
        prompt: str,
        json_mode: bool = True,
        temperature: float = 0.2,
        max_tokens: int = None
    ) -> str:
        """Helper to generate content from either provider, retrying on rate limits."""
        if not self.client:
            raise ValueError("AI Client not initialized")

        max_retries = max(1, settings.AI_MAX_RETRIES)
        for attempt in range(max_retries):
            try:
                text = self._call_provider(prompt, json_mode, temperature, max_tokens)
                return strip_code_fences(text)
            except Exception as e:
                if self._is_rate_limit(e) and attempt < max_retries - 1:
                    logger.warning(
                        f"{self.provider} rate limit hit. Waiting {settings.AI_RETRY_DELAY_SECONDS}s... "
                        f"(Attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(settings.AI_RETRY_DELAY_SECONDS)
                else:
                    logger.error(f"{self.provider} generation failed: {e}")
                    raise

    def _generate_json(self, prompt: str, temperature: float = 0.2):
        return json.loads(self._generate_content(prompt, json_mode=True, temperature=temperature))

    def _persona_prompt(self, persona_type: str, persona=None) -> str:
        lines = [PERSONA_INSTRUCTIONS.get(persona_type, PERSONA_INSTRUCTIONS["intermediate"])]
        if persona is not None:
            lines.append(f"Your name is {persona.name}. {persona.description}")
            lines.append(f"Personality: {persona.personality}. Tone: {persona.tone}.")
            if persona.expertise_areas:
                lines.append(f"Areas of expertise: {', '.join(persona.expertise_areas)}.")
            lines.append(
                f"Aim for a response length of {persona.response_length} on a scale "
                f"from 1 (very brief) to 5 (very detailed)."
            )
        return "\n".join(lines)

    def generate_answer(self, title: str, content: str, persona_type: str = "expert", persona=None) -> str:
        """Markdown answer to a forum question in the voice of a persona."""
        if not self.client:
            return FALLBACK_ANSWER

        prompt = f"""{self._persona_prompt(persona_type, persona)}

Answer the following forum question. Use Markdown formatting where it helps.
Do not mention that you are an AI.

QUESTION TITLE: {title}
QUESTION DETAILS: {content or '(no details given)'}
"""
        temperature = 0.3 if persona_type == "expert" else 0.7
        max_tokens = MAX_TOKENS.get(persona_type, DEFAULT_MAX_TOKENS)
        try:
            text = self._generate_content(prompt, json_mode=False, temperature=temperature, max_tokens=max_tokens)
            return text or FALLBACK_ANSWER
        except Exception as e:
            logger.error(f"AI answer generation failed: {e}")
            return FALLBACK_ANSWER

    def generate_seo_questions(self, topic: str, count: int = 5, persona_type: str = "beginner") -> list:
        """Questions that people search for about a topic, as {title, content} dicts."""
        if not self.client:
            return []

        prompt = f"""{PERSONA_INSTRUCTIONS.get(persona_type, PERSONA_INSTRUCTIONS['beginner'])}

Write {count} realistic forum questions about "{topic}" that people commonly search for.
Each question needs a search-friendly title (5-200 characters) and a body of at least
two sentences describing the situation.

OUTPUT FORMAT (JSON ONLY):
{{"questions": [{{"title": "<title>", "content": "<body>"}}]}}
"""
        try:
            result = self._generate_json(prompt, temperature=0.7)
        except Exception as e:
            logger.error(f"AI question generation failed: {e}")
            return []

        items = result.get("questions", []) if isinstance(result, dict) else result
        questions = []
        for item in _as_list(items):
            if not isinstance(item, dict):
                continue
            title = str(item.get("title") or "").strip()
            body = str(item.get("content") or "").strip()
            if len(title) >= 5 and body:
                questions.append({"title": title[:200], "content": body})
        return questions[:count]

    def analyze_question_seo(self, title: str, content: str) -> dict:
        """Keyword and SEO quality analysis of a question."""
        fallback = {
            "primary_keywords": [],
            "secondary_keywords": [],
            "suggested_tags": [],
            "seo_score": 0,
            "improvement_tips": [],
        }
        if not self.client:
            return fallback

        prompt = f"""Act as an SEO specialist. Analyze this forum question for search visibility.

TITLE: {title}
CONTENT: {content}

OUTPUT FORMAT (JSON ONLY):
{{
    "primary_keywords": ["<keyword>"],
    "secondary_keywords": ["<keyword>"],
    "suggested_tags": ["<tag>"],
    "seo_score": <integer 0-100>,
    "improvement_tips": ["<tip>"]
}}
"""
        try:
            result = self._generate_json(prompt)
        except Exception as e:
            logger.error(f"AI SEO analysis failed: {e}")
            return fallback

        if not isinstance(result, dict):
            return fallback

        return {
            "primary_keywords": _as_list(result.get("primary_keywords")),
            "secondary_keywords": _as_list(result.get("secondary_keywords")),
            "suggested_tags": _as_list(result.get("suggested_tags")),
            "seo_score": _clamp(result.get("seo_score"), 0, 100, 0),
            "improvement_tips": _as_list(result.get("improvement_tips")),
        }

    def generate_interlinking_suggestions(
        self,
        source_title: str,
        source_content: str,
        source_type: str,
        targets: list,
        limit: int = 5
    ) -> list:
        """
        Ask the model which targets the source should link to.
        ``targets`` are dicts with id, type and title.
        """
        if not self.client or not targets:
            return []

        catalogue = "\n".join(
            f"- id={t['id']} type={t['type']} title={t['title']}" for t in targets
        )
        prompt = f"""Act as an SEO interlinking expert. Pick the pages the source {source_type}
should link to and propose natural anchor text for each.

SOURCE TITLE: {source_title}
SOURCE CONTENT: {source_content[:2000]}

CANDIDATE PAGES:
{catalogue}

Only use ids from the candidate list. Score relevance from 0 to 100.

OUTPUT FORMAT (JSON ONLY):
{{"suggestions": [{{"contentId": "<id>", "contentType": "<question|answer|main_page>",
"title": "<title>", "anchorText": "<anchor>", "relevanceScore": <0-100>, "reason": "<why>"}}]}}
"""
        try:
            result = self._generate_json(prompt)
        except Exception as e:
            logger.error(f"AI interlinking suggestions failed: {e}")
            return []

        valid_ids = {str(t["id"]) for t in targets}
        return normalize_interlink_suggestions(result, valid_ids=valid_ids, limit=limit)

    def analyze_website_keywords(self, url: str, question_count: int = 10) -> dict:
        """Keyword strategy for a website plus question ideas for its forum."""
        fallback = {
            "primary_keywords": [],
            "secondary_keywords": [],
            "question_ideas": [],
            "topics": [],
            "content_gaps": [],
            "competitor_insights": [],
        }
        if not self.client:
            return fallback

        prompt = f"""Act as an SEO strategist. Analyze the website {url} and its likely audience.

OUTPUT FORMAT (JSON ONLY):
{{
    "primary_keywords": ["<keyword>"],
    "secondary_keywords": ["<keyword>"],
    "question_ideas": [{{"title": "<question>", "keyword": "<target keyword>",
                         "difficulty": "<beginner|intermediate|expert>"}}],
    "topics": ["<topic>"],
    "content_gaps": ["<missing content>"],
    "competitor_insights": ["<insight>"]
}}
Give exactly {question_count} question ideas.
"""
        try:
            result = self._generate_json(prompt)
        except Exception as e:
            logger.error(f"AI website keyword analysis failed: {e}")
            return fallback

        if not isinstance(result, dict):
            return fallback

        ideas = []
        for item in _as_list(result.get("question_ideas")):
            if isinstance(item, dict) and item.get("title"):
                ideas.append({
                    "title": str(item["title"]),
                    "keyword": item.get("keyword"),
                    "difficulty": normalize_difficulty(item.get("difficulty")),
                })
        return {
            "primary_keywords": _as_list(result.get("primary_keywords")),
            "secondary_keywords": _as_list(result.get("secondary_keywords")),
            "question_ideas": ideas[:question_count],
            "topics": _as_list(result.get("topics")),
            "content_gaps": _as_list(result.get("content_gaps")),
            "competitor_insights": _as_list(result.get("competitor_insights")),
        }

    def keyword_difficulty(self, keywords: list) -> list:
        """Estimated difficulty, volume and intent per keyword."""
        fallback = [
            {"keyword": k, "difficulty": None, "search_volume": None, "intent": "unknown"}
            for k in keywords
        ]
        if not self.client:
            return fallback

        prompt = f"""Act as an SEO analyst. Estimate ranking difficulty for each keyword.

KEYWORDS: {json.dumps(keywords)}

OUTPUT FORMAT (JSON ONLY):
{{"keywords": [{{"keyword": "<keyword>", "difficulty": <0-100>, "search_volume": <monthly searches>,
"intent": "<informational|commercial|navigational|transactional>"}}]}}
"""
        try:
            result = self._generate_json(prompt)
        except Exception as e:
            logger.error(f"AI keyword difficulty failed: {e}")
            return fallback

        estimates = {}
        for item in _as_list(result.get("keywords") if isinstance(result, dict) else result):
            if isinstance(item, dict) and item.get("keyword"):
                estimates[str(item["keyword"]).lower()] = item

        rows = []
        for keyword in keywords:
            item = estimates.get(keyword.lower())
            if not item:
                rows.append({"keyword": keyword, "difficulty": None, "search_volume": None, "intent": "unknown"})
                continue
            volume = item.get("search_volume")
            rows.append({
                "keyword": keyword,
                "difficulty": _clamp(item.get("difficulty"), 0, 100, 50),
                "search_volume": volume if isinstance(volume, int) else None,
                "intent": item.get("intent") or "unknown",
            })
        return rows

    def content_gaps(self, topic: str, existing_titles: list) -> list:
        """Subtopics not yet covered by the existing questions."""
        if not self.client:
            return []

        covered = "\n".join(f"- {t}" for t in existing_titles[:100]) or "(none yet)"
        prompt = f"""Act as a content strategist for a Q&A forum about "{topic}".

EXISTING QUESTIONS:
{covered}

List the important subtopics that are missing.

OUTPUT FORMAT (JSON ONLY):
{{"gaps": [{{"topic": "<subtopic>", "reason": "<why it matters>", "suggested_title": "<question title>"}}]}}
"""
        try:
            result = self._generate_json(prompt)
        except Exception as e:
            logger.error(f"AI content gap analysis failed: {e}")
            return []

        items = result.get("gaps") if isinstance(result, dict) else result
        return [g for g in _as_list(items) if isinstance(g, dict) and g.get("topic")]

    def analyze_competitor(self, competitor: dict) -> dict:
        """Strengths, weaknesses and keyword opportunities against a competitor."""
        fallback = {
            "strengths": [],
            "weaknesses": [],
            "keyword_opportunities": [],
            "summary": "AI analysis unavailable",
        }
        if not self.client:
            return fallback

        prompt = f"""Act as a competitive SEO analyst.

COMPETITOR:
{json.dumps(competitor, default=str)}

OUTPUT FORMAT (JSON ONLY):
{{
    "strengths": ["<strength>"],
    "weaknesses": ["<weakness>"],
    "keyword_opportunities": ["<keyword we could win>"],
    "summary": "<two sentence summary>"
}}
"""
        try:
            result = self._generate_json(prompt)
        except Exception as e:
            logger.error(f"AI competitor analysis failed: {e}")
            return fallback

        if not isinstance(result, dict):
            return fallback

        return {
            "strengths": _as_list(result.get("strengths")),
            "weaknesses": _as_list(result.get("weaknesses")),
            "keyword_opportunities": _as_list(result.get("keyword_opportunities")),
            "summary": result.get("summary") or "",
        }

    def generate_persona_suggestions(self, website_url: str, count: int = 3) -> list:
        """Draft AI personas suited to a website's audience."""
        if not self.client:
            return []

        prompt = f"""Suggest {count} forum personas that would answer questions for the
audience of {website_url}. Mix experience levels.

OUTPUT FORMAT (JSON ONLY):
{{"personas": [{{"name": "<name>", "type": "<beginner|intermediate|expert|moderator>",
"description": "<who they are>", "personality": "<traits>", "tone": "<tone>",
"response_length": <1-5>, "expertise_areas": ["<area>"]}}]}}
"""
        try:
            result = self._generate_json(prompt, temperature=0.7)
        except Exception as e:
            logger.error(f"AI persona suggestions failed: {e}")
            return []

        drafts = []
        items = result.get("personas") if isinstance(result, dict) else result
        for item in _as_list(items):
            if not isinstance(item, dict) or not item.get("name"):
                continue
            persona_type = item.get("type")
            drafts.append({
                "name": str(item["name"]),
                "type": persona_type if persona_type in PERSONA_TYPES else "intermediate",
                "description": item.get("description") or "",
                "personality": item.get("personality") or "helpful",
                "tone": item.get("tone") or "friendly",
                "response_length": _clamp(item.get("response_length"), 1, 5, 3),
                "expertise_areas": _as_list(item.get("expertise_areas")),
            })
        return drafts[:count]


ai_service = AIContentService()
