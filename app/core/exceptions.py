from typing import List, Optional


class LeadEngineError(Exception):
    """Base class for all lead-engine domain exceptions.

    Every custom exception in this module inherits from here so that a
    single ``except LeadEngineError`` clause can catch any domain
    error.
    """

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class RuleNotFoundError(LeadEngineError):
    """Raised when a requested rule does not exist."""

    def __init__(self, detail: str = "Rule not found"):
        super().__init__(detail)


class DuplicateRuleError(LeadEngineError):
    """Raised when creating a rule whose id is already taken."""

    def __init__(self, detail: str = "Rule with this ID already exists"):
        super().__init__(detail)


class RuleValidationError(LeadEngineError):
    """Raised when a rule definition fails administrative validation.

    ``errors`` carries one human-readable message per offending field so
    the caller can show them all at once.
    """

    def __init__(
        self,
        errors: Optional[List[str]] = None,
        detail: str = "Rule validation failed",
    ):
        self.errors = list(errors or [])
        super().__init__(detail)


class QualificationError(LeadEngineError):
    """Raised when a qualification pass fails as a whole.

    No partial result accompanies this error; callers fall back to a
    manual-review state.
    """

    def __init__(self, detail: str = "Failed to qualify lead"):
        super().__init__(detail)


class TaggingError(LeadEngineError):
    """Raised when tag generation fails as a whole."""

    def __init__(self, detail: str = "Failed to generate intelligent tags"):
        super().__init__(detail)


class NoAgentAvailableError(LeadEngineError):
    """Raised when no agent is available or has spare capacity."""

    def __init__(self, detail: str = "No agents available for routing"):
        super().__init__(detail)


class RuleStoreUnavailableError(LeadEngineError):
    """Raised when the persistent rule store cannot be written."""

    def __init__(self, detail: str = "Rule store unavailable"):
        super().__init__(detail)
