"""Tests for chat-based draft refinement."""

import pytest

from vidcraft.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from vidcraft.adapters.llm.stub import StubLLMProvider
from vidcraft.db.session import get_session_context
from vidcraft.domain.enums import AgentStatus
from vidcraft.errors import PermissionDeniedError, ValidationError
from vidcraft.services.agents import AgentService
from vidcraft.services.projects import ProjectService
from vidcraft.services.refinement import (
    ContentRefiner,
    build_refine_prompt,
    extract_updated_draft,
    get_refine_system_prompt,
)
from vidcraft.services.videos import VideoService


class FixedLLM(LLMProvider):
    def __init__(self, content: str) -> None:
        self.content = content
        self.prompts: list[str] = []

    @property
    def name(self) -> str:
        return "fixed"

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        self.prompts.append(messages[-1].content)
        return LLMResponse(content=self.content, model="fixed-1")


def create_agent(user_id: str, draft: str = "10 Tips for Better Sleep") -> str:
    with get_session_context() as session:
        project = ProjectService(session).create(user_id, "Sleep series")
        video = VideoService(session).create(user_id, project.id, "Sleep hygiene")
        video.transcription = "Tonight we talk about circadian rhythm and caffeine."
        agents = AgentService(session)
        agent = agents.create(user_id, video.id, "title")
        agents.update_draft(agent.id, user_id, draft)
        return str(agent.id)


class TestExtractUpdatedDraft:
    def test_text_after_marker(self) -> None:
        response = "Sure, punchier it is!\n\nUPDATED TITLE:\n  Sleep Better Tonight  \n"
        assert extract_updated_draft(response, "title", "old") == "Sleep Better Tonight"

    def test_missing_marker_keeps_draft(self) -> None:
        assert extract_updated_draft("Happy to help!", "title", "old") == "old"

    def test_marker_is_case_sensitive(self) -> None:
        assert extract_updated_draft("updated title:\nNew", "title", "old") == "old"

    def test_marker_uses_agent_type(self) -> None:
        response = "Done.\nUPDATED TWEETS:\n1/ New thread"
        assert extract_updated_draft(response, "tweets", "old") == "1/ New thread"
        assert extract_updated_draft(response, "title", "old") == "old"


def test_system_prompt_names_marker() -> None:
    prompt = get_refine_system_prompt("description")

    assert "UPDATED DESCRIPTION:" in prompt
    assert "Optimize for SEO" in prompt


def test_refine_prompt_includes_history_and_context() -> None:
    prompt = build_refine_prompt(
        "title",
        "Old Title",
        [
            {"role": "user", "message": "make it shorter"},
            {"role": "ai", "message": "Done"},
        ],
        "add a number",
        transcription="t" * 1500,
    )

    assert prompt.startswith("Current title: Old Title\n\n")
    assert "User: make it shorter\nAssistant: Done\n" in prompt
    assert "Video context: " + "t" * 1000 + "...\n" in prompt
    assert "User: add a number\n\n" in prompt


class TestContentRefiner:
    @pytest.mark.asyncio
    async def test_refine_updates_draft_and_history(self, user_id: str) -> None:
        agent_id = create_agent(user_id)

        result = await ContentRefiner(llm=StubLLMProvider()).refine(
            agent_id, user_id, "make it punchier"
        )

        assert result.changed is True
        assert result.updated_draft == "Refined stub content (make it punchier)"
        with get_session_context() as session:
            agent = AgentService(session).get(agent_id, user_id)
            assert agent.draft == result.updated_draft
            assert agent.status == AgentStatus.READY
            history = agent.chat_history
            assert [m["role"] for m in history] == ["user", "ai"]
            assert history[0]["message"] == "make it punchier"
            assert history[1]["message"] == result.response
            assert history[0]["timestamp"] <= history[1]["timestamp"]

    @pytest.mark.asyncio
    async def test_reply_without_marker_keeps_draft(self, user_id: str) -> None:
        agent_id = create_agent(user_id)
        llm = FixedLLM("Could you tell me which part you'd like to change?")

        result = await ContentRefiner(llm=llm).refine(agent_id, user_id, "hmm")

        assert result.changed is False
        assert result.updated_draft == "10 Tips for Better Sleep"
        assert "Video context: Tonight we talk about circadian rhythm" in llm.prompts[0]
        with get_session_context() as session:
            agent = AgentService(session).get(agent_id, user_id)
            assert agent.draft == "10 Tips for Better Sleep"
            assert len(agent.chat_history) == 2

    @pytest.mark.asyncio
    async def test_history_is_sent_on_next_turn(self, user_id: str) -> None:
        agent_id = create_agent(user_id)
        llm = FixedLLM("Okay!\nUPDATED TITLE:\nSleep Like a Baby")
        refiner = ContentRefiner(llm=llm)

        await refiner.refine(agent_id, user_id, "first request")
        await refiner.refine(agent_id, user_id, "second request")

        assert "User: first request\nAssistant: Okay!" in llm.prompts[1]
        assert llm.prompts[1].startswith("Current title: Sleep Like a Baby")

    @pytest.mark.asyncio
    async def test_empty_message_rejected(self, user_id: str) -> None:
        agent_id = create_agent(user_id)
        llm = FixedLLM("unused")

        with pytest.raises(ValidationError, match="Message is required"):
            await ContentRefiner(llm=llm).refine(agent_id, user_id, "   ")
        assert llm.prompts == []

    @pytest.mark.asyncio
    async def test_other_users_agent(self, user_id: str) -> None:
        agent_id = create_agent(user_id)

        with pytest.raises(PermissionDeniedError):
            await ContentRefiner(llm=FixedLLM("x")).refine(agent_id, "someone_else", "hi")
