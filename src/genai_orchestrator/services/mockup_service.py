"""Product mockup generation on top of the orchestrator."""

from genai_orchestrator.config import settings
from genai_orchestrator.entities import AIResponse, GenerationResult, RequestConfig

from .cancellation import CancelToken
from .orchestrator import GenerationOrchestrator

STYLE_PRESETS: dict[str, str] = {
    "studio": "professional studio photography with clean lighting",
    "lifestyle": "authentic lifestyle photography in natural setting",
    "editorial": "high-fashion editorial magazine style",
    "minimal": "minimalist clean background composition",
    "dramatic": "dramatic lighting with bold shadows",
    "vibrant": "colorful energetic composition with vibrant hues",
    "vintage": "retro vintage aesthetic with film grain",
    "professional": "corporate professional photography style",
}

DEFAULT_STYLE = "studio"

MOCKUP_SYSTEM_INSTRUCTION = """\
You are a professional product mockup generator. Your task is to create \
photorealistic product mockups featuring the provided logo/design.

Rules:
1. The logo/design MUST be clearly visible on the product
2. Maintain the logo's original colors and proportions
3. Apply realistic lighting and shadows to the logo
4. The product should look like a real photograph
5. Do not add any text, watermarks, or branding not in the original logo
6. Output only the final product mockup image"""

MOCKUP_TEMPERATURE = 0.8


def describe_style(style: str) -> str:
    """Return the prompt fragment for a style preset, falling back to studio."""
    return STYLE_PRESETS.get(style, STYLE_PRESETS[DEFAULT_STYLE])


class MockupService:
    """Builds mockup prompts and routes them through the orchestrator.

    Example:
        ```python
        mockups = MockupService(orchestrator)
        result = await mockups.generate_mockup(
            logo_image=logo_b64,
            product_prompt="A white ceramic mug with the logo, {style}",
            style="lifestyle",
        )
        ```
    """

    def __init__(self, orchestrator: GenerationOrchestrator) -> None:
        self._orchestrator = orchestrator

    async def generate_mockup(
        self,
        logo_image: str,
        product_prompt: str,
        style: str = DEFAULT_STYLE,
        background_image: str | None = None,
        model: str | None = None,
        cancel: CancelToken | None = None,
    ) -> GenerationResult[AIResponse]:
        """Render a logo onto a product.

        Args:
            logo_image: Base64 logo or design
            product_prompt: Product description; ``{style}`` is replaced by the preset text
            style: Style preset name (unknown names use "studio")
            background_image: Optional base64 scene to place the product in
            model: Model id. Defaults to settings.default_model.
            cancel: Optional cancellation token / deadline

        Returns:
            GenerationResult with the mockup response (cached like any request)
        """
        prompt = product_prompt.replace("{style}", describe_style(style))
        images = [logo_image]
        if background_image:
            images.append(background_image)

        config = RequestConfig(
            model=model or settings.default_model,
            system_instruction=MOCKUP_SYSTEM_INSTRUCTION,
            temperature=MOCKUP_TEMPERATURE,
            max_output_tokens=8192,
        )
        return await self._orchestrator.request(prompt, images, config, cancel=cancel)

    async def generate_variations(
        self,
        base_prompt: str,
        logo_image: str,
        count: int = 3,
        cancel: CancelToken | None = None,
    ) -> GenerationResult[list[AIResponse]]:
        return await self._orchestrator.generate_variations(
            base_prompt, logo_image, count, cancel=cancel
        )

    async def has_api_key(self) -> bool:
        return await self._orchestrator.credentials.has()

    async def set_api_key(self, api_key: str) -> None:
        await self._orchestrator.credentials.set(api_key)

    async def remove_api_key(self) -> None:
        await self._orchestrator.credentials.remove()
