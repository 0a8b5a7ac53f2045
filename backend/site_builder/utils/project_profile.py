"""
Framework detection and colour themes for new project generation.
"""
from __future__ import annotations

import json
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_FRAMEWORK = "react"

FORMAT_INSTRUCTIONS: Dict[str, str] = {
    "react": "React with TypeScript, Vite, and Tailwind CSS (PRODUCTION-READY)",
    "vue": "Vue 3 with Composition API, TypeScript, and Tailwind CSS",
    "angular": "Angular with TypeScript and Tailwind CSS",
    "svelte": "Svelte with TypeScript and Tailwind CSS",
    "vanilla": "Vanilla HTML5, Modern CSS3, and ES6+ JavaScript",
    "next": "Next.js with TypeScript, App Router, and Tailwind CSS",
    "nuxt": "Nuxt 3 with TypeScript and Tailwind CSS",
    "python": "Python with Flask/FastAPI and modern frontend",
    "php": "PHP with modern frontend integration",
    "node": "Node.js with Express and REST/GraphQL API",
}

COLOR_THEMES: Dict[str, Dict[str, str]] = {
    "blue": {"primary": "#3B82F6", "secondary": "#1E40AF", "accent": "#DBEAFE"},
    "purple": {"primary": "#8B5CF6", "secondary": "#5B21B6", "accent": "#EDE9FE"},
    "green": {"primary": "#10B981", "secondary": "#047857", "accent": "#D1FAE5"},
    "orange": {"primary": "#F59E0B", "secondary": "#D97706", "accent": "#FEF3C7"},
    "pink": {"primary": "#EC4899", "secondary": "#BE185D", "accent": "#FCE7F3"},
    "dark": {"primary": "#1F2937", "secondary": "#111827", "accent": "#F9FAFB"},
    "red": {"primary": "#EF4444", "secondary": "#DC2626", "accent": "#FEE2E2"},
    "yellow": {"primary": "#EAB308", "secondary": "#CA8A04", "accent": "#FEF3C7"},
    "indigo": {"primary": "#6366F1", "secondary": "#4F46E5", "accent": "#E0E7FF"},
    "teal": {"primary": "#14B8A6", "secondary": "#0D9488", "accent": "#CCFBF1"},
    "cyan": {"primary": "#06B6D4", "secondary": "#0891B2", "accent": "#CFFAFE"},
    "lime": {"primary": "#84CC16", "secondary": "#65A30D", "accent": "#ECFCCB"},
}
DEFAULT_THEME = "blue"

# Explicit framework mentions in special requests win unless React is also requested.
_EXPLICIT_FRAMEWORKS = ("vue", "angular", "svelte", "nuxt")


def _mentions(text: str, *words: str) -> bool:
    return any(word in text for word in words)


def determine_framework(
    description: str,
    template: Optional[str] = None,
    special_requests: Optional[str] = None,
) -> str:
    """Pick the target framework for a new project. Defaults to React."""
    desc = (description or "").lower()
    tmpl = (template or "").lower()
    special = (special_requests or "").lower()
    wants_react = "react" in special

    for name in _EXPLICIT_FRAMEWORKS:
        if name in special and not wants_react:
            return name
    if _mentions(special, "python", "flask", "django"):
        return "python"
    if "php" in special:
        return "php"
    if _mentions(special, "node", "express"):
        return "node"
    if _mentions(special, "vanilla", "html"):
        return "vanilla"
    if "next" in special:
        return "next"

    if not wants_react and (
        _mentions(desc, "ecommerce", "store", "shop", "saas", "payment", "seo")
        or _mentions(tmpl, "ecommerce", "saas")
    ):
        return "next"

    if (
        "frontend" not in special
        and not wants_react
        and _mentions(desc, "api", "backend", "server", "database", "rest", "graphql")
    ):
        return "node"

    if not wants_react and (
        _mentions(desc, "simple", "static", "landing", "marketing", "brochure")
        or "landing" in tmpl
    ):
        return "vanilla"

    return DEFAULT_FRAMEWORK


def framework_label(framework: str) -> str:
    return FORMAT_INSTRUCTIONS.get(framework, "React with TypeScript")


def resolve_theme_colors(color_theme: Optional[str]) -> Dict[str, str]:
    """
    Map a theme name, or a JSON object string of custom colours, to a palette.

    Unknown names and malformed JSON fall back to the default theme.
    """
    theme = (color_theme or "").strip()
    if theme.startswith("{"):
        try:
            custom = json.loads(theme)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed custom colour theme: %s", theme[:100])
        else:
            if isinstance(custom, dict):
                return {str(k): str(v) for k, v in custom.items()}
    return dict(COLOR_THEMES.get(theme.lower(), COLOR_THEMES[DEFAULT_THEME]))
