"""LLM and image generation components.

- `client.py`: LiteLLM client wrapper and JSON reply parsing
- `prompt_loader.py`: Prompt template loading utility
- `level_designer.py`: Level metadata generation and validation
- `image_generator.py`: Base and modified picture generation (google-genai)
- `provider.py`: GeminiContentProvider, combining the two

Import directly from submodules:
    from machigai.llm.provider import GeminiContentProvider
"""

from machigai.llm.client import get_completion, parse_json_response, get_model_string
from machigai.llm.prompt_loader import get_loader

__all__ = [
    "get_completion",
    "parse_json_response",
    "get_model_string",
    "get_loader",
]
