"""Conversational refinement of an agent's draft.

The model is asked for a friendly reply followed by an ``UPDATED <TYPE>:``
line and the replacement draft. Without that line the draft is unchanged.
"""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from vidcraft.adapters.llm import LLMProvider, get_llm_provider
from vidcraft.db.session import get_session_context
from vidcraft.domain.enums import AgentStatus, ChatRole
from vidcraft.errors import ServiceError, ValidationError, categorize_error
from vidcraft.logging import get_logger
from vidcraft.services.agents import AgentService

logger = get_logger(__name__)

REFINE_TEMPERATURE = 0.7
REFINE_MAX_TOKENS = 500
VIDEO_CONTEXT_CHARS = 1000

_GUIDELINES = {
    "title": """
- Keep titles under 60 characters
- Make them engaging and clickable
- Include relevant keywords
- Avoid clickbait but create curiosity""",
    "description": """
- Include relevant keywords naturally
- Structure with clear sections
- Add timestamps if mentioned
- Include calls-to-action
- Optimize for SEO""",
    "thumbnail": """
- Describe visual elements clearly
- Suggest compelling text overlays
- Recommend color schemes
- Focus on eye-catching composition
- Consider mobile visibility""",
    "tweets": """
- Keep within Twitter/X character limits
- Make each tweet valuable standalone
- Include relevant hashtags
- Create engaging hooks
- Encourage retweets and engagement""",
    "blog": """
- Keep the JSON structure (title, content, metaDescription, keywords, links)
- Preserve H2/H3 headings inside content
- Keep the meta description between 150 and 160 characters""",
    "linkedin": """
- Keep a one-line hook at the top
- Use short paragraphs
- Stay professional and specific
- End with a question for readers""",
}


def get_refine_system_prompt(agent_type: str) -> str:
    return (
        f"You are an AI assistant helping to refine {agent_type} content for YouTube videos.\n"
        "When the user asks for changes, provide:\n"
        "1. A friendly response acknowledging their request\n"
        f"2. The updated {agent_type} that incorporates their feedback\n"
        "\n"
        "Format your response as:\n"
        "[Your conversational response]\n"
        "\n"
        f"UPDATED {agent_type.upper()}:\n"
        "[The refined content]\n"
        "\n"
        "Important guidelines:" + _GUIDELINES.get(agent_type, "")
    )


def build_refine_prompt(
    agent_type: str,
    current_draft: str,
    chat_history: list[dict[str, Any]],
    message: str,
    transcription: str | None = None,
) -> str:
    prompt = f"Current {agent_type}: {current_draft}\n\n"

    if chat_history:
        prompt += "Previous conversation:\n"
        for entry in chat_history:
            speaker = "User" if entry.get("role") == ChatRole.USER else "Assistant"
            prompt += f"{speaker}: {entry.get('message', '')}\n"
        prompt += "\n"

    if transcription:
        prompt += f"Video context: {transcription[:VIDEO_CONTEXT_CHARS]}...\n\n"

    prompt += (
        f"User: {message}\n\n"
        "Please provide your response following the format specified in the system prompt."
    )
    return prompt


def extract_updated_draft(response: str, agent_type: str, current_draft: str) -> str:
    """Return the text after ``UPDATED <TYPE>:``, or ``current_draft`` if absent.

    The marker match is case-sensitive.
    """
    marker = f"UPDATED {agent_type.upper()}:"
    index = response.find(marker)
    if index == -1:
        return current_draft
    return response[index + len(marker):].strip()


@dataclass
class RefinementResult:
    response: str
    updated_draft: str
    changed: bool = False


class ContentRefiner:
    """Runs one chat turn against an agent and persists the outcome."""

    def __init__(self, llm: LLMProvider | None = None) -> None:
        self.llm = llm or get_llm_provider()

    async def refine(self, agent_id: str | UUID, user_id: str, message: str) -> RefinementResult:
        """Send ``message`` about the agent's current draft.

        Persists, in order: the user message, the full AI reply, and the new
        draft (status ready) when it differs from the current one.

        Raises:
            ValidationError: If the message is empty
            NotFoundError: If the agent does not exist
            PermissionDeniedError: If the agent belongs to another user
        """
        message = message.strip()
        if not message:
            raise ValidationError("Message is required")

        with get_session_context() as session:
            agent = AgentService(session).get(agent_id, user_id)
            agent_key = agent.id
            agent_type = agent.type
            current_draft = agent.draft or ""
            history = list(agent.chat_history or [])
            transcription = agent.video.transcription if agent.video else None

        system_prompt = get_refine_system_prompt(agent_type)
        prompt = build_refine_prompt(agent_type, current_draft, history, message, transcription)

        try:
            response = await self.llm.ask(
                system_prompt,
                prompt,
                temperature=REFINE_TEMPERATURE,
                max_tokens=REFINE_MAX_TOKENS,
            )
        except ServiceError:
            raise
        except Exception as e:
            raise categorize_error(e, context="refine") from e

        reply = response.content
        updated = extract_updated_draft(reply, agent_type, current_draft)

        with get_session_context() as session:
            agents = AgentService(session)
            agents.add_chat_message(agent_key, None, ChatRole.USER, message)
            agents.add_chat_message(agent_key, None, ChatRole.AI, reply)
            if updated != current_draft:
                agents.update_draft(agent_key, None, updated, status=AgentStatus.READY)

        logger.info(
            "agent_refined",
            agent_id=str(agent_key),
            agent_type=agent_type,
            draft_changed=updated != current_draft,
        )
        return RefinementResult(
            response=reply,
            updated_draft=updated,
            changed=updated != current_draft,
        )
