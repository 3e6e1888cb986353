"""Sequential model fallback.

Models are tried strictly one after another, never raced: at most one
outbound call per pipeline step is in flight. The first success wins.
Credential and quota failures stop the chain immediately because every
later model would fail the same way.
"""

import logging
from typing import Callable, TypeVar

from src.design_engine.errors import (
    CredentialError,
    ModelChainExhausted,
    QuotaExhaustedError,
    TransientModelError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_with_fallback(
    models: list[str],
    call: Callable[[str], T],
    stage: str,
    exhausted_error: type[ModelChainExhausted] = ModelChainExhausted,
) -> tuple[str, T]:
    """Call ``call(model)`` for each model in order until one succeeds.

    Args:
        models: Ordered model names, best first.
        call: Performs one request against one model; raises a BackendError
            subclass on failure.
        stage: Label used in logs and in the exhaustion error.
        exhausted_error: ModelChainExhausted subclass raised when every model fails.

    Returns:
        (model, result) for the first model that succeeded.
    """
    tried: list[str] = []
    last_error: Exception | None = None

    for model in models:
        tried.append(model)
        logger.info(f"[{stage}] Trying model: {model}")
        try:
            result = call(model)
        except (CredentialError, QuotaExhaustedError) as e:
            logger.error(f"[{stage}] {type(e).__name__} on {model}; not trying further models")
            raise
        except TransientModelError as e:
            last_error = e
            logger.warning(f"[{stage}] Model {model} failed: {e.message}")
            continue
        logger.info(f"[{stage}] Success with model: {model}")
        return model, result

    raise exhausted_error(stage, tried, last_error)
