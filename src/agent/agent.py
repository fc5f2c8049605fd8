"""Answer generator for questions about a processed video.

Formats the retrieved transcript chunks and the user question into a fixed
prompt and runs it through a Pydantic AI agent backed by the configured
OpenAI-compatible model.
"""

from pydantic_ai import Agent
from pydantic_ai.models import Model

from src.agent.config import get_model, get_temperature
from src.utils.logging import get_logger
from src.video_pipeline.schemas import RetrievedChunk

logger = get_logger(__name__)

# ==============================================================================
# Prompt Template
# ==============================================================================

ANSWER_PROMPT_TEMPLATE = """You are a helpful assistant for YouTube video content.
Answer ONLY from the provided transcript context.
If the context is insufficient, just say you don't know.

Context: {context}
Question: {question}"""


# ==============================================================================
# Answer Generator
# ==============================================================================


class AnswerGenerator:
    """Generates answers grounded in retrieved transcript chunks.

    Each call is independent: no conversation memory, no streaming.
    """

    def __init__(self, model: Model | None = None, temperature: float | None = None):
        """Initialize the generator.

        Args:
            model: Model to run (default: get_model()).
            temperature: Sampling temperature (default: get_temperature()).
        """
        self.temperature = get_temperature() if temperature is None else temperature
        self.agent = Agent(
            model or get_model(),
            model_settings={"temperature": self.temperature},
        )
        logger.info("answer_generator_initialized", temperature=self.temperature)

    @staticmethod
    def format_prompt(question: str, chunks: list[RetrievedChunk]) -> str:
        """Fill the prompt template with chunk texts and the question.

        Args:
            question: User question.
            chunks: Retrieved transcript chunks.

        Returns:
            Prompt string sent to the model.

        Examples:
            >>> AnswerGenerator.format_prompt("Who is speaking?", [])
            "You are a helpful assistant ... Question: Who is speaking?"
        """
        context = "\n\n".join(chunk.text_content for chunk in chunks)
        return ANSWER_PROMPT_TEMPLATE.format(context=context, question=question)

    async def generate(self, question: str, chunks: list[RetrievedChunk]) -> str:
        """Answer a question from the retrieved chunks.

        Args:
            question: User question.
            chunks: Retrieved transcript chunks used as context.

        Returns:
            Raw answer text from the model.

        Raises:
            Exception: If the model call fails.
        """
        prompt = self.format_prompt(question, chunks)
        logger.info(
            "answer_generation_started",
            question_length=len(question),
            context_chunks=len(chunks),
        )

        try:
            result = await self.agent.run(prompt)
        except Exception as e:
            logger.exception("answer_generation_failed", error_type=type(e).__name__)
            raise

        answer = str(result.output)
        logger.info("answer_generation_completed", answer_length=len(answer))
        return answer
