from typing import Final


APP_DIRNAME: Final[str] = "tag-blocker"
SETTINGS_FILENAME: Final[str] = "settings.json"
EXPORT_FILENAME: Final[str] = "tag_blocker_rules.json"

ORIGINAL_PROMPT_KEY: Final[str] = "_originalPrompt"

# Destinations whose request bodies are inspected. Matched as plain substrings.
GENERATION_ENDPOINT_MARKERS: Final[tuple[str, ...]] = (
    "/api/v1/generate",
    "/api/v1/chat",
    "/v1/chat/completions",
    "/v1/completions",
    "/generate",
    "/chat/completions",
    "/completions",
    # Claude
    "/v1/messages",
    # Gemini
    "/v1beta/models",
)

LOCAL_HOST_MARKER: Final[str] = "localhost"
LOCAL_ENDPOINT_MARKERS: Final[tuple[str, ...]] = (
    "/generate",
    "/chat",
    "/completion",
)

REGEX_NAME_PREVIEW_LENGTH: Final[int] = 20
EXCLUSION_PREVIEW_LENGTH: Final[int] = 100
