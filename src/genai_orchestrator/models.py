"""Catalog of supported generative models.

Maps the public model id (what callers put in ``RequestConfig.model``) to the
provider model name used in the endpoint path and to the per-million-token
rates used for cost estimation.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelSpec:
    """Provider routing and pricing for a model id."""

    model_id: str
    api_model: str
    input_rate_per_million: float
    output_rate_per_million: float

    def cost(self, input_tokens: int, output_tokens: int) -> float:
        """Estimate the USD cost of a call with the given token counts."""
        input_cost = (input_tokens / 1_000_000) * self.input_rate_per_million
        output_cost = (output_tokens / 1_000_000) * self.output_rate_per_million
        return input_cost + output_cost


MODEL_CATALOG: dict[str, ModelSpec] = {
    spec.model_id: spec
    for spec in (
        ModelSpec("gemini-2.5-flash-image", "gemini-2.0-flash-exp-image-generation", 0.075, 0.30),
        ModelSpec("gemini-3-flash-preview", "gemini-exp-1206", 0.075, 0.30),
        ModelSpec("gemini-3-pro-preview", "gemini-2.0-pro-exp", 1.25, 5.00),
        ModelSpec("gemini-3-pro-image-preview", "gemini-2.0-flash-exp-image-generation", 1.25, 5.00),
    )
}


def get_model_spec(model_id: str) -> ModelSpec | None:
    """Look up a model, returning None for ids outside the catalog."""
    return MODEL_CATALOG.get(model_id)


def resolve_api_model(model_id: str) -> str:
    """Return the provider model name, passing unknown ids through unchanged."""
    spec = MODEL_CATALOG.get(model_id)
    return spec.api_model if spec else model_id
