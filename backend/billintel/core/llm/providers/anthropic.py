from anthropic import Anthropic

from billintel.core.llm.base import BaseLLM
from billintel.core.llm.schemas import GenerateConfig, LLMResponse

DEFAULT_MAX_TOKENS = 1024


class AnthropicProvider(BaseLLM):
    def __init__(self, api_key: str, model: str, timeout: float | None = None):
        super().__init__(api_key=api_key, model=model, timeout=timeout)
        if timeout:
            self._client = Anthropic(api_key=api_key, timeout=timeout)
        else:
            self._client = Anthropic(api_key=api_key)

    def _build_params(self, config: GenerateConfig) -> dict:
        params: dict = {
            "temperature": config.temperature,
            "top_p": config.top_p,
            "max_tokens": config.max_tokens or DEFAULT_MAX_TOKENS,
        }
        if config.stop is not None:
            params["stop_sequences"] = config.stop
        return params

    def generate(self, messages: list[dict], config: GenerateConfig | None = None) -> LLMResponse:
        config = config or GenerateConfig()
        system_text, history = self.split_system(messages)

        request: dict = {
            "model": self._model,
            "messages": history,
            **self._build_params(config),
        }
        if system_text:
            request["system"] = system_text
        response = self._client.messages.create(**request)

        text_parts = []
        for block in response.content:
            if getattr(block, "text", None):
                text_parts.append(block.text)

        usage = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
            }

        return LLMResponse(text="".join(text_parts), usage=usage)
