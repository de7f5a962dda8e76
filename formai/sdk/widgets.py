"""
HTML fragments for the embeddable widgets.

Every value coming from the forum is HTML-escaped before it is placed in
the markup.
"""
import html
from typing import List, Optional


def escape_text(value) -> str:
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _widget(kind: str, theme: str, title: str, body: str, footer: str = "") -> str:
    footer_html = f'<div class="formai-widget-footer">{footer}</div>' if footer else ""
    return (
        f'<div class="formai-widget formai-{kind}-widget" data-theme="{escape_text(theme)}">'
        f'<div class="formai-widget-header"><h3 class="formai-widget-title">{escape_text(title)}</h3></div>'
        f'<div class="formai-widget-body">{body}</div>'
        f"{footer_html}"
        "</div>"
    )


def question_url(base_url: str, forum_id, question_id) -> str:
    return f"{base_url}/forum/{forum_id}/q/{question_id}"


def render_question_items(
    questions: List[dict],
    base_url: str,
    forum_id,
    show_answer_count: bool = True,
    show_view_count: bool = True
) -> str:
    if not questions:
        return '<li class="formai-empty-state">No questions found</li>'

    items = []
    for question in questions:
        meta = []
        if show_answer_count:
            meta.append(f'<span class="formai-meta-item">{_plural(question.get("answerCount") or 0, "answer")}</span>')
        if show_view_count:
            meta.append(f'<span class="formai-meta-item">{_plural(question.get("views") or 0, "view")}</span>')
        href = escape_text(question_url(base_url, forum_id, question.get("id")))
        items.append(
            '<li class="formai-question-item">'
            f'<a href="{href}" target="_blank" class="formai-question-title">{escape_text(question.get("title"))}</a>'
            f'<div class="formai-question-meta">{"".join(meta)}</div>'
            "</li>"
        )
    return "".join(items)


def render_questions(
    questions: List[dict],
    base_url: str,
    forum_id,
    title: str = "Recent Questions",
    show_answer_count: bool = True,
    show_view_count: bool = True,
    theme: str = "light"
) -> str:
    """List of question links with a link to the full forum."""
    items = render_question_items(questions, base_url, forum_id, show_answer_count, show_view_count)
    body = f'<ul class="formai-questions-list">{items}</ul>'
    footer = (
        f'<a href="{escape_text(f"{base_url}/forum/{forum_id}")}" target="_blank" '
        'class="formai-widget-link">View all questions</a>'
    )
    return _widget("questions", theme, title, body, footer)


def render_ask(
    categories: Optional[List[dict]] = None,
    title: str = "Ask a Question",
    theme: str = "light",
    button_text: str = "Submit Question",
    placeholder: str = "What would you like to ask?",
    show_ai_preview: bool = False
) -> str:
    """Question form. The category select is only rendered when categories exist."""
    category_html = ""
    if categories:
        options = "".join(
            f'<option value="{escape_text(c.get("id"))}">{escape_text(c.get("name"))}</option>'
            for c in categories
        )
        category_html = (
            '<div class="formai-form-group">'
            '<label for="formai-category">Category</label>'
            '<select id="formai-category" class="formai-form-select" required>'
            f'<option value="">Select a category</option>{options}'
            "</select></div>"
        )

    preview_html = ""
    if show_ai_preview:
        preview_html = (
            '<div class="formai-ai-preview-container" style="display: none;">'
            '<div class="formai-ai-preview-header"><h4>AI-Generated Answer Preview</h4></div>'
            '<div class="formai-ai-preview-result"></div>'
            "</div>"
            '<button type="button" class="formai-preview-button">Get AI Answer Preview</button>'
        )

    body = (
        '<form id="formai-ask-form" class="formai-ask-form">'
        '<div class="formai-form-group">'
        '<label for="formai-title">Title</label>'
        '<input type="text" id="formai-title" class="formai-form-input" '
        'placeholder="Enter your question title" required>'
        "</div>"
        f"{category_html}"
        '<div class="formai-form-group">'
        '<label for="formai-content">Details</label>'
        f'<textarea id="formai-content" class="formai-form-textarea" placeholder="{escape_text(placeholder)}" '
        'rows="5" required></textarea>'
        "</div>"
        f"{preview_html}"
        '<div class="formai-form-error" style="display: none;"></div>'
        f'<button type="submit" class="formai-form-button">{escape_text(button_text)}</button>'
        "</form>"
    )
    return _widget("ask", theme, title, body)


def render_search(
    base_url: str,
    forum_id,
    query: str = "",
    results: Optional[List[dict]] = None,
    title: str = "Search Questions",
    theme: str = "light",
    placeholder: str = "Search the forum..."
) -> str:
    """Search box, followed by the results when a search has run."""
    results_html = ""
    if results is not None:
        if results:
            items = "".join(
                '<li class="formai-search-result">'
                f'<a href="{escape_text(question_url(base_url, forum_id, r.get("id")))}" target="_blank">'
                f'{escape_text(r.get("title"))}</a>'
                "</li>"
                for r in results
            )
        else:
            items = f'<li class="formai-empty-state">No results for "{escape_text(query)}"</li>'
        results_html = f'<ul class="formai-search-results">{items}</ul>'

    body = (
        '<form class="formai-search-form">'
        f'<input type="search" class="formai-form-input" name="q" value="{escape_text(query)}" '
        f'placeholder="{escape_text(placeholder)}">'
        '<button type="submit" class="formai-form-button">Search</button>'
        "</form>"
        f"{results_html}"
    )
    return _widget("search", theme, title, body)
