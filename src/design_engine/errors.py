"""Exception hierarchy for the design engine.

Configuration-class failures (credentials, quota) are kept apart from
retry-worthy failures so callers can tell "fix your setup" from "try again".
"""


class DesignEngineError(Exception):
    """Base exception for all design engine errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\n  Details: {self.details}"
        return self.message


class ConfigurationError(DesignEngineError):
    """Raised when configuration is missing or invalid."""

    pass


# ---------------------------------------------------------------------------
# Backend call failures (one model, one request)
# ---------------------------------------------------------------------------

class BackendError(DesignEngineError):
    """A single inference call failed."""

    def __init__(self, message: str, model: str | None = None, details: str | None = None):
        super().__init__(message, details)
        self.model = model


class CredentialError(BackendError):
    """API key missing or rejected. Fatal: no further models are tried."""

    pass


class QuotaExhaustedError(BackendError):
    """The backend reports insufficient credits or quota. Fatal for the stage."""

    pass


class TransientModelError(BackendError):
    """Any other per-model failure. The next model in the chain is tried."""

    pass


# ---------------------------------------------------------------------------
# Fallback chain exhaustion
# ---------------------------------------------------------------------------

class ModelChainExhausted(DesignEngineError):
    """Every model in a fallback chain failed with a retryable error."""

    def __init__(
        self,
        stage: str,
        models_tried: list[str],
        last_error: Exception | None = None,
    ):
        self.stage = stage
        self.models_tried = list(models_tried)
        self.last_model = self.models_tried[-1] if self.models_tried else None
        self.last_error = last_error
        last = str(last_error) if last_error else "no models configured"
        super().__init__(
            f"{stage}: all {len(self.models_tried)} models failed",
            details=f"last model={self.last_model}, last error={last}",
        )


class ExtractionFailed(ModelChainExhausted):
    """No vision model could analyze the reference image."""

    pass


class OutlineGenerationFailed(ModelChainExhausted):
    """No generative model produced an outline."""

    pass


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------

class ResponseParseError(DesignEngineError):
    """A backend answered, but not with usable structured output."""

    def __init__(self, message: str, raw_content: str | None = None, model: str | None = None):
        preview = (raw_content or "")[:200]
        super().__init__(message, details=f"model={model}, raw={preview!r}")
        self.raw_content = raw_content
        self.model = model


class ExtractionParseError(ResponseParseError):
    pass


class OutlineParseError(ResponseParseError):
    pass


# ---------------------------------------------------------------------------
# Store / ranking
# ---------------------------------------------------------------------------

class ScoringInputError(DesignEngineError):
    """An exemplar record is malformed and cannot be scored."""

    def __init__(self, message: str, exemplar_id: str | None = None):
        super().__init__(message, details=f"exemplar_id={exemplar_id}")
        self.exemplar_id = exemplar_id


class ExemplarNotFoundError(DesignEngineError, KeyError):
    """No exemplar with the requested id exists in the store."""

    def __init__(self, exemplar_id: str):
        DesignEngineError.__init__(self, f"Exemplar not found: {exemplar_id}")
        self.exemplar_id = exemplar_id

    def __str__(self) -> str:
        return self.message
