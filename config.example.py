# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKTRACK_APP_NAME": "App display name (default: tasktrack).",
    "TASKTRACK_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKTRACK_DATA_DIR": "Local data directory for the log file (default: .local/tasktrack).",
    # Core behaviour
    "TASKTRACK_SEED_DEMO_DATA": "Load the demo users/tasks at startup (default: true).",
    "TASKTRACK_STRICT_TRANSITIONS": "Make Completed/Cancelled terminal (default: false).",
    "TASKTRACK_NOTIFICATION_PAGE_SIZE": "Notifications returned per page (default: 10).",
    "TASKTRACK_NOTIFICATION_POLL_SECONDS": "Console notification poll interval (default: 12).",
    # Text suggestions / OpenRouter
    "TASKTRACK_SUGGESTIONS_ENABLED": "Enable AI text suggestions (default: true).",
    "TASKTRACK_OPENROUTER_API_KEY": "OpenRouter API key (suggestions stay off without it).",
    "TASKTRACK_OPENROUTER_BASE_URL": "OpenRouter base URL (default: https://openrouter.ai/api/v1).",
    "TASKTRACK_LLM_MODELS": "Comma/space separated list of models to try in order.",
    "TASKTRACK_HTTP_REFERER": "Optional OpenRouter metadata header.",
    "TASKTRACK_APP_TITLE": "Optional OpenRouter metadata header title.",
    "TASKTRACK_LLM_CONNECT_TIMEOUT_SECONDS": "Connect timeout for suggestion calls (default: 5).",
    "TASKTRACK_LLM_READ_TIMEOUT_SECONDS": "Read timeout for suggestion calls (default: 25).",
}
