"""
LLM provider interface.

Defines the contract for the AI responder: a black-box text completion
service. Implementations: LiteLLM (Groq, OpenAI, Bedrock, ...).
"""

from abc import ABC, abstractmethod


class ILLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float,
    ) -> str:
        """
        Produce a completion for a conversation.

        Args:
            system_prompt: Instruction placed before the messages
            messages: Ordered {"role", "content"} pairs
            max_tokens: Maximum output length
            temperature: Creativity parameter

        Returns:
            Completion text

        Raises:
            Any exception on transport or provider failure
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Get the human-readable model name.

        Returns:
            Model name string for logging/display
        """
        pass
