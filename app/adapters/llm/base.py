from abc import ABC, abstractmethod


class AbstractLLMClient(ABC):
	"""Interface for chat-completion clients that return plain text replies."""

	@abstractmethod
	async def complete(
		self,
		*,
		model: str,
		system_prompt: str,
		user_content: str,
		temperature: float,
	) -> str:
		"""Run one chat completion and return the trimmed reply text.

		Args:
			model: Provider model id to invoke.
			system_prompt: Instruction sent as the system message.
			user_content: Raw user text sent as the user message.
			temperature: Sampling temperature.

		Returns:
			str: Non-empty reply text.

		Raises:
			LLMAppError: If the provider call fails, times out, or returns no content.
		"""
		...
