import google.generativeai as genai

from billintel.core.llm.base import BaseLLM
from billintel.core.llm.schemas import GenerateConfig, LLMResponse


class GoogleProvider(BaseLLM):
    def __init__(self, api_key: str, model: str, timeout: float | None = None):
        super().__init__(api_key=api_key, model=model, timeout=timeout)
        genai.configure(api_key=api_key)

    @staticmethod
    def _to_contents(history: list[dict]) -> list[dict]:
        return [
            {
                "role": "model" if turn["role"] == "assistant" else "user",
                "parts": [turn["content"]],
            }
            for turn in history
        ]

    def _build_config(self, config: GenerateConfig) -> genai.types.GenerationConfig:
        params: dict = {
            "temperature": config.temperature,
            "top_p": config.top_p,
        }
        if config.max_tokens is not None:
            params["max_output_tokens"] = config.max_tokens
        if config.stop is not None:
            params["stop_sequences"] = config.stop
        return genai.types.GenerationConfig(**params)

    def _request_options(self) -> dict | None:
        if not self._timeout:
            return None
        return {"timeout": self._timeout}

    def generate(self, messages: list[dict], config: GenerateConfig | None = None) -> LLMResponse:
        config = config or GenerateConfig()
        system_instruction, history = self.split_system(messages)
        model = genai.GenerativeModel(self._model, system_instruction=system_instruction)
        response = model.generate_content(
            self._to_contents(history) or "",
            generation_config=self._build_config(config),
            request_options=self._request_options(),
        )
        text = getattr(response, "text", "") or ""

        usage = {}
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None:
            usage = {
                "prompt_tokens": metadata.prompt_token_count,
                "completion_tokens": metadata.candidates_token_count,
                "total_tokens": metadata.total_token_count,
            }
        return LLMResponse(text=text, usage=usage)
