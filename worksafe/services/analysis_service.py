"""
Safety analysis service using a vision-capable LLM

One request, one model call:
- validate the relayed image and the provider credential
- send the fixed safety prompt together with the image
- normalize the model's free-form answer into an AnalysisResult
"""

from typing import Any, Optional

from langchain_core.messages import HumanMessage

from worksafe.core.config import get_settings
from worksafe.core.deps import get_llm, get_provider_api_key
from worksafe.core.errors import (
    NO_MODEL_RESPONSE,
    InvalidModelResponse,
    RelayError,
    classify_provider_error,
)
from worksafe.core.logger import get_logger
from worksafe.schemas.safety import AnalysisResult
from worksafe.services.normalizer import normalize_model_output

logger = get_logger(__name__)


SAFETY_ANALYSIS_PROMPT = """
You are a workplace safety expert analyzing a photo for potential safety risks. Please analyze this image and identify any safety hazards, violations, or risks present.

For each risk you identify, provide:
1. A clear title describing the risk
2. A risk level: "low", "medium", or "high"
3. A specific recommendation to address the risk

Format your response as a JSON object with this structure:
{
  "risks": [
    {
      "title": "Description of the risk",
      "level": "low|medium|high",
      "recommendation": "Specific action to take"
    }
  ]
}

Focus on identifying risks related to:
- Personal protective equipment (PPE) usage
- Equipment safety and maintenance
- Environmental hazards
- Ergonomics and posture
- Fire safety
- Electrical safety
- Chemical safety
- Fall protection
- General workplace organization and cleanliness

If no significant risks are found, respond with an empty risks array.
"""


class AnalysisService:
    """
    Relay between the client and the vision model

    The model is resolved per request from the current credential unless one
    is injected (tests, alternative providers).
    """

    def __init__(self, llm=None):
        self.settings = get_settings()
        self._llm = llm

    async def analyze_image(self, base64_image: Any) -> AnalysisResult:
        """
        Analyze a base64 data-URI photo for workplace safety risks

        Flow:
        1. Reject a missing image (400) or a missing credential (500)
        2. Invoke the model once with prompt + image
        3. Normalize the text answer, dropping malformed risks
        """
        if not isinstance(base64_image, str) or not base64_image.strip():
            raise RelayError.missing_input()

        api_key = get_provider_api_key()
        if not api_key:
            logger.error("OPENAI_API_KEY is not set")
            raise RelayError.missing_credential()

        llm = self._llm if self._llm is not None else get_llm(api_key)

        content = await self._invoke_model(llm, base64_image)
        result = normalize_model_output(content)

        logger.info("Analysis complete: %d risks", len(result.risks))
        return result

    def _build_messages(self, base64_image: str) -> list:
        return [
            HumanMessage(
                content=[
                    {
                        "type": "text",
                        "text": SAFETY_ANALYSIS_PROMPT,
                    },
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": base64_image,
                            "detail": self.settings.image_detail,
                        },
                    },
                ]
            ),
        ]

    async def _invoke_model(self, llm, base64_image: str) -> str:
        """Call the model and return its text content"""
        messages = self._build_messages(base64_image)

        try:
            response = await llm.ainvoke(messages)
        except Exception as e:
            logger.exception("Error in analyze API")
            raise classify_provider_error(e) from e

        content = _message_text(getattr(response, "content", None))
        if not content:
            raise InvalidModelResponse(NO_MODEL_RESPONSE)
        return content


def _message_text(content: Optional[Any]) -> str:
    """Flatten LangChain message content (str or list of parts) to text"""
    if content is None:
        return ""
    if isinstance(content, str):
        return content.strip()

    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(str(part.get("text", "")))
    return "".join(parts).strip()
