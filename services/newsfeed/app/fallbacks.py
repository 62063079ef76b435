"""Deterministic stand-ins used when the language model is unavailable."""

from typing import List

from shared.schemas.news import Article

NO_SUMMARY_TEXT = "• Article summary is not available at this time"

REACT_RESPONSE = (
    "For React development, I recommend checking the official React documentation at reactjs.org. "
    "Common patterns include using hooks like useState and useEffect for state management."
)
JAVASCRIPT_RESPONSE = (
    "JavaScript is a versatile language. For modern development, consider using ES6+ features "
    "like arrow functions, destructuring, and async/await for cleaner code."
)
CSS_RESPONSE = (
    "For CSS, consider using Flexbox or Grid for layouts, and CSS variables for maintainable theming. "
    "Tailwind CSS is also great for utility-first styling."
)
API_RESPONSE = (
    "For API calls, use fetch() with async/await or libraries like axios. "
    "Always handle errors and loading states in your UI."
)
GENERIC_RESPONSE = (
    "I'm a coding assistant here to help with programming questions. "
    "Feel free to ask about React, JavaScript, CSS, APIs, or other development topics!"
)

# First match wins, so order matters ("jsx" must hit React before "js" hits JavaScript).
_KEYWORD_RESPONSES = (
    (("react", "jsx"), REACT_RESPONSE),
    (("javascript", "js"), JAVASCRIPT_RESPONSE),
    (("css", "styling"), CSS_RESPONSE),
    (("api", "fetch"), API_RESPONSE),
)


def fallback_summary(article: Article) -> str:
    """Title's first clause plus up to two substantial description sentences."""
    points: List[str] = []

    if article.title:
        points.append(f"• {article.title.split(':')[0]}")

    if article.description:
        sentences = [s for s in article.description.split(".") if len(s.strip()) > 20]
        points.extend(f"• {s.strip()}" for s in sentences[:2])

    if not points:
        points.append(NO_SUMMARY_TEXT)

    return "\n".join(points)


def fallback_chat_response(message: str) -> str:
    lowered = message.lower()
    for keywords, response in _KEYWORD_RESPONSES:
        if any(keyword in lowered for keyword in keywords):
            return response
    return GENERIC_RESPONSE
