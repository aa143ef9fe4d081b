"""errors.py — Fatal error kinds raised while building a book."""


class BuildError(Exception):
    """Base class for every error that stops a build."""


class ConfigurationMissing(BuildError, ValueError):
    """One or more required configuration values are absent."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required configuration: {', '.join(self.missing)}")


class FetchFailure(BuildError):
    """The chapter list could not be retrieved or decoded."""

    def __init__(self, source: str, cause):
        self.source = source
        self.cause = cause
        super().__init__(f"Could not fetch {source}: {cause}")


class SchemaViolation(BuildError, ValueError):
    """Fetched data is not a list of {title, content} objects."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        detail = "; ".join(self.problems[:10])
        if len(self.problems) > 10:
            detail += f"; ... ({len(self.problems) - 10} more)"
        super().__init__(f"JSON must be [{{title, content}}, ...]: {detail}")
