# src/smart_taskboard/llm/offline.py

from __future__ import annotations

import json
import re
from collections import Counter

_TITLE_RE = re.compile(r'^Title: "(.*)"$', re.MULTILINE)
_DESCRIPTION_RE = re.compile(r'^Description: "(.*)"$', re.MULTILINE)
_TASK_LINE_RE = re.compile(r"\((low|medium|high) priority, (todo|doing|done)\)$", re.MULTILINE)

# Checked in order; first match wins.
_CATEGORY_RULES: list[tuple[str, tuple[str, ...]]] = [
    ("testing", ("test", "pytest", "coverage", "e2e", "qa")),
    ("documentation", ("doc", "readme", "guide", "changelog", "wiki")),
    ("devops", ("deploy", "ci/cd", "pipeline", "docker", "kubernetes", "server setup", "nginx", "infra")),
    ("database", ("database", "sql", "migration", "schema", "index", "postgres", "sqlite", "query")),
    ("design", ("design", "mockup", "wireframe", "ux", "figma", "layout")),
    ("frontend", ("frontend", "ui", "css", "react", "page", "button", "form", "component", "browser")),
]

_TAG_PATTERNS: list[tuple[str, str]] = [
    (r"\b(auth|authentication|login)\b", "auth"),
    (r"\b(frontend|ui|client)\b", "frontend"),
    (r"\b(backend|server|api)\b", "backend"),
    (r"\b(database|db|sql|sqlite)\b", "database"),
    (r"\b(test|testing|tests)\b", "testing"),
    (r"\b(docs?|documentation)\b", "docs"),
    (r"\b(security|encryption)\b", "security"),
    (r"\b(performance|perf|slow)\b", "performance"),
    (r"\b(bug|fix|broken|crash|error)\b", "bug"),
]


def _rule_based_analysis(title: str, description: str) -> dict[str, object]:
    text = f"{title} {description}".lower()

    category = "backend"
    for name, words in _CATEGORY_RULES:
        if any(re.search(rf"\b{re.escape(w)}", text) for w in words):
            category = name
            break

    priority = "medium"
    if any(w in text for w in ("urgent", "critical", "asap", "blocker", "security", "crash", "broken")):
        priority = "high"
    elif any(w in text for w in ("nice to have", "low priority", "someday", "eventually", "typo")):
        priority = "low"

    words = len(text.split())
    hours = 2 if words < 8 else 4 if words < 25 else 8
    if priority == "high":
        hours += 2

    tags: list[str] = []
    for pattern, tag in _TAG_PATTERNS:
        if re.search(pattern, text) and tag not in tags:
            tags.append(tag)
    if category not in tags:
        tags.insert(0, category)
    if len(tags) < 2:
        tags.append("task")

    return {
        "category": category,
        "priority": priority,
        "estimatedHours": hours,
        "reasoning": "Offline estimate from keywords in the title and description.",
        "tags": tags[:4],
    }


def _rule_based_insights(prompt: str) -> list[str]:
    pairs = _TASK_LINE_RE.findall(prompt)
    priorities = Counter(p for p, _ in pairs)
    statuses = Counter(s for _, s in pairs)

    insights = [
        f"{len(pairs)} tasks tracked: {statuses['todo']} to do, "
        f"{statuses['doing']} in progress, {statuses['done']} done.",
    ]
    if priorities["high"]:
        insights.append(f"{priorities['high']} high priority tasks; finish those before picking up new work.")
    else:
        insights.append("No high priority tasks right now.")
    if statuses["doing"] > 3:
        insights.append("Many tasks are in progress at once; consider limiting work in progress.")
    elif statuses["todo"] and not statuses["doing"]:
        insights.append("Nothing is in progress; move a task to doing to get started.")
    else:
        insights.append("Work in progress looks balanced.")
    return insights


class OfflineTextGenerator:
    """
    Offline deterministic text generator used when no external API is configured.

    Behavior:
    - Task analysis prompts -> keyword rule-based JSON analysis
    - Insight prompts -> JSON array computed from the task summary lines
    - Anything else -> an empty JSON object
    """

    def generate(self, prompt: str) -> str:
        if "Analyze this software development task" in prompt:
            title_m = _TITLE_RE.search(prompt)
            desc_m = _DESCRIPTION_RE.search(prompt)
            analysis = _rule_based_analysis(
                title_m.group(1) if title_m else "",
                desc_m.group(1) if desc_m else "",
            )
            return json.dumps(analysis)

        if "insights as a JSON array" in prompt:
            return json.dumps(_rule_based_insights(prompt))

        return "{}"
