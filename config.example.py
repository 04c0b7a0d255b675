# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKBOARD_APP_NAME": "App display name (default: Smart Task Board).",
    "TASKBOARD_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Storage (gitignored)
    "TASKBOARD_DATA_DIR": "Local data directory for tasks.json and taskboard.log (default: .local/taskboard).",
    "TASKBOARD_TASKS_PATH": "Task file path (default: <data_dir>/tasks.json).",
    # AI / OpenAI-compatible endpoint
    "TASKBOARD_LLM_API_KEY": "API key for the endpoint. GEMINI_API_KEY is accepted as a fallback.",
    "TASKBOARD_LLM_BASE_URL": (
        "OpenAI-compatible base URL "
        "(default: https://generativelanguage.googleapis.com/v1beta/openai/)."
    ),
    "TASKBOARD_LLM_MODELS": "Comma/space separated list of models to try in order (default: gemini-1.5-flash).",
    "TASKBOARD_LLM_OFFLINE": "Use the rule-based offline analysis even when a key is set (true/false).",
    "TASKBOARD_LLM_CONNECT_TIMEOUT_SECONDS": "Connect timeout per AI request (default: 5).",
    "TASKBOARD_LLM_READ_TIMEOUT_SECONDS": "Read timeout per AI request (default: 30).",
}
