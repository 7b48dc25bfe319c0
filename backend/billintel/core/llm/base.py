from abc import ABC, abstractmethod

from billintel.core.llm.schemas import GenerateConfig, LLMResponse


class BaseLLM(ABC):
    def __init__(self, api_key: str, model: str, timeout: float | None = None):
        self._api_key = api_key
        self._model = model
        self._timeout = timeout

    @property
    def model(self) -> str:
        return self._model

    @abstractmethod
    def generate(self, messages: list[dict], config: GenerateConfig | None = None) -> LLMResponse:
        """Generate a response from the LLM based on the provided messages."""
        pass

    @staticmethod
    def split_system(messages: list[dict]) -> tuple[str | None, list[dict]]:
        """Pull system messages out of a chat transcript.

        Returns the joined system text (or None) and the remaining
        user/assistant turns as ``{"role", "content"}`` dicts.
        """
        system_parts: list[str] = []
        history: list[dict] = []

        for message in messages:
            role = message.get("role")
            content = message.get("content", "")
            if role == "system":
                if content:
                    system_parts.append(str(content))
                continue
            history.append({
                "role": "assistant" if role == "assistant" else "user",
                "content": str(content),
            })

        system_text = "\n\n".join(system_parts) if system_parts else None
        return system_text, history
