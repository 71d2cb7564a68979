from pathlib import Path


class TagBlockerError(Exception):
    """Base user-facing application error."""


class TagBlockerFileError(TagBlockerError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class InvalidJsonFormatError(TagBlockerFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid JSON format ({detail})")


class InvalidSettingsError(TagBlockerFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid settings ({detail})")


class InvalidScriptError(TagBlockerFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid rule script ({detail})")


class InvalidConversationError(TagBlockerFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid conversation file ({detail})")


class InvalidRuleError(TagBlockerError):
    pass


class RuleNotFoundError(TagBlockerError):
    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"Rule not found: {ref}")


class AmbiguousRuleError(TagBlockerError):
    def __init__(self, ref: str, matches: list[str]) -> None:
        self.ref = ref
        self.matches = matches
        super().__init__(f"Rule reference '{ref}' is ambiguous: {', '.join(matches)}")


class ExclusionNotFoundError(TagBlockerError):
    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"Exclusion entry not found: {ref}")
