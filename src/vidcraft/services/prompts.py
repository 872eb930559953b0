"""Prompt construction for content generation.

System prompts are fixed per agent type. The user prompt is assembled in a
fixed order: task framing, video title, transcription excerpt, manual
transcriptions, connected agent outputs, channel profile, mood board,
type-specific instructions, additional requirements.
"""

import re
from dataclasses import dataclass

from vidcraft.domain.enums import AgentType
from vidcraft.domain.models import GenerationRequest

TRANSCRIPTION_EXCERPT_CHARS = 1000
MANUAL_TRANSCRIPTION_PREVIEW_CHARS = 2000


@dataclass(frozen=True)
class GenerationParams:
    temperature: float
    max_tokens: int
    json_mode: bool = False


GENERATION_PARAMS: dict[AgentType, GenerationParams] = {
    AgentType.TITLE: GenerationParams(temperature=0.8, max_tokens=100),
    AgentType.DESCRIPTION: GenerationParams(temperature=0.7, max_tokens=500),
    AgentType.THUMBNAIL: GenerationParams(temperature=0.9, max_tokens=400),
    AgentType.TWEETS: GenerationParams(temperature=0.8, max_tokens=300),
    AgentType.BLOG: GenerationParams(temperature=0.7, max_tokens=2500, json_mode=True),
    AgentType.LINKEDIN: GenerationParams(temperature=0.7, max_tokens=600),
}

# Frame analysis call of the two-stage thumbnail flow
VISION_PARAMS = GenerationParams(temperature=0.7, max_tokens=500)

SYSTEM_PROMPTS: dict[AgentType, str] = {
    AgentType.TITLE: """You are a world-class YouTube title optimization expert with 10+ years of experience. Your titles consistently achieve 10%+ CTR.

CRITICAL ANALYSIS PROCESS:
1. Analyze video content to identify main value proposition
2. Extract specific numbers, results, or outcomes
3. Identify emotional hooks and surprising elements
4. Consider channel brand and audience expectations
5. Optimize for both clickability and accuracy

TITLE OPTIMIZATION RULES:
- Maximum 60 characters (YouTube truncates after this)
- Front-load compelling elements in first 30 characters
- Include 1-2 searchable keywords naturally
- Ensure accuracy to video content
- Test readability at a glance

OUTPUT: Return ONLY the title text, no formatting or prefixes.""",
    AgentType.DESCRIPTION: """You are an expert YouTube description writer focused on viewer value and engagement.

DESCRIPTION STRATEGY:
1. Start with immediate value proposition
2. Use scannable formatting with bullet points
3. Include relevant keywords naturally
4. End with clear call-to-action
5. Optimize for both viewers and algorithm

STRUCTURE:
- Opening hook (what viewers will gain)
- Key points or timestamps
- Relevant links/resources
- Engagement prompts
- Channel/creator info

OUTPUT: 2-3 paragraphs focusing on viewer benefits.""",
    AgentType.THUMBNAIL: """You are a YouTube thumbnail psychology expert specializing in high-CTR designs.

THUMBNAIL PSYCHOLOGY:
1. Visual hierarchy with one clear focal point
2. High contrast colors (Red, Yellow, Blue, White)
3. Emotional expressions that match content
4. Text overlay: 3-5 words maximum
5. Readable at mobile size (120x90px)

DESIGN PRINCIPLES:
- Rule of thirds composition
- Bold, sans-serif fonts
- Contrasting stroke/shadow for text
- Before/after splits for comparisons
- Numbers/arrows for attention direction

OUTPUT: Detailed visual description with specific elements, colors, and text placement.""",
    AgentType.TWEETS: """You are a social media expert creating engaging Twitter threads that drive YouTube views.

TWITTER STRATEGY:
1. Create curiosity without giving everything away
2. Use conversational, natural language
3. Include specific benefits or insights
4. End with clear call-to-action
5. Optimize for engagement and clicks

THREAD FORMAT:
Tweet 1: Hook with curiosity gap
Tweet 2: Key insight or benefit
Tweet 3: Call-to-action with link

OUTPUT: Exactly 2-3 tweets, natural conversational tone.""",
    AgentType.BLOG: """You are an expert content marketer specializing in SEO-optimized blog posts. Generate a blog post based on the provided source content (video title, transcript, and related material). The post must:

1. Title: An engaging, SEO-friendly title (50-60 characters) with a primary keyword.
2. Structure: An introduction, 3-4 main sections with H2/H3 subheadings, and a conclusion.
3. Content: 800-1,200 words of actionable insights, examples, or stories derived from the source.
4. SEO: Integrate 3-5 relevant keywords naturally, include a meta description (150-160 characters), and suggest 2-3 internal/external links (as URLs with titles).
5. Tone: Professional yet approachable, suitable for thought leadership.
6. Call-to-Action: End with a CTA encouraging engagement.
7. Originality: Rewrite and summarize in a unique voice. Do NOT copy sentences or paragraphs directly.

OUTPUT FORMAT:
Return ONLY a valid JSON object with this exact structure:
{
  "title": "SEO-friendly title (50-60 characters)",
  "content": "Full blog post content with HTML tags for H2/H3 headings and formatting",
  "metaDescription": "Meta description (150-160 characters)",
  "keywords": ["keyword1", "keyword2", "keyword3"],
  "links": [{"url": "https://example.com", "title": "Link Title"}]
}

Do NOT include any text before or after the JSON object.""",
    AgentType.LINKEDIN: """You are a LinkedIn content strategist who turns YouTube videos into posts that professionals read, save and share.

LINKEDIN STRATEGY:
1. Open with a one-line hook that stops the scroll
2. Share the single most useful lesson from the video
3. Use short paragraphs and line breaks for readability
4. Speak from experience, not hype
5. Close with a question that invites comments

OUTPUT: One post of 150-250 words followed by 3-5 relevant hashtags, with a placeholder for the video link.""",
}

TYPE_INSTRUCTIONS: dict[AgentType, str] = {
    AgentType.TITLE: """TITLE CREATION CHECKLIST:
- Uses specific details from content (not generic)
- Under 60 characters total
- Front-loads compelling element
- Matches channel brand and tone
- Creates curiosity without misleading
- Includes relevant keywords naturally
""",
    AgentType.DESCRIPTION: """DESCRIPTION REQUIREMENTS:
- Start with immediate value proposition
- Use scannable formatting (bullets/numbers)
- Include relevant keywords naturally
- Focus on viewer benefits
- End with engagement call-to-action
- Keep paragraphs short (2-3 sentences max)

FORMAT STRUCTURE:
1. Opening hook (what viewers will gain)
2. Key points or main sections
3. Call-to-action for engagement
""",
    AgentType.THUMBNAIL: """THUMBNAIL DESIGN REQUIREMENTS:
- One clear focal point (face/object/text)
- High contrast colors (Red/Yellow/Blue/White)
- Text overlay: 3-5 words maximum
- Readable at mobile size (120x90px)
- Emotional expression matches content
- 16:9 aspect ratio optimized for YouTube

VISUAL HIERARCHY:
- Primary element: Main subject/face
- Secondary element: Text overlay
- Background: Supporting visuals
""",
    AgentType.TWEETS: """TWITTER THREAD REQUIREMENTS:
- Conversational and natural tone
- Creates curiosity gap
- Specific benefit or insight mentioned
- Clear call-to-action
- No jargon or complex language
- Appropriate hashtags if relevant

THREAD STRUCTURE:
Tweet 1: Hook with curiosity
Tweet 2: Key insight/benefit
Tweet 3: Call-to-action with link placeholder
""",
    AgentType.BLOG: """BLOG POST REQUIREMENTS:
- Return the JSON object described in the system prompt
- Use H2/H3 headings inside "content"
- Keep the meta description between 150 and 160 characters
- Suggest links that are relevant to the topic
""",
    AgentType.LINKEDIN: """LINKEDIN POST REQUIREMENTS:
- First line works as a standalone hook
- One clear professional takeaway
- Short paragraphs separated by blank lines
- Ends with a question for the reader
- 3-5 hashtags on the final line
""",
}

_MOOD_BOARD_HINTS = {
    "youtube": "Study style, pacing, and engagement techniques",
    "music": "Match energy, mood, and emotional tone",
    "image": "Draw visual inspiration and aesthetic cues",
}


class PromptBuilder:
    """Builds system and user prompts for a generation request."""

    @staticmethod
    def system_prompt(agent_type: AgentType) -> str:
        return SYSTEM_PROMPTS[agent_type]

    @staticmethod
    def user_prompt(request: GenerationRequest) -> str:
        agent_type = AgentType(request.agent_type)
        video = request.video_data
        parts: list[str] = [f"Generate {agent_type} content for a YouTube video.\n\n"]

        if video.title:
            parts.append(f"Video Title: {video.title}\n")

        if video.transcription:
            excerpt = video.transcription[:TRANSCRIPTION_EXCERPT_CHARS]
            parts.append(f"Video Transcription: {excerpt}...\n\n")

        if video.manual_transcriptions:
            parts.append("Manual Transcriptions:\n")
            for transcript in video.manual_transcriptions:
                preview = transcript.text
                if len(preview) > MANUAL_TRANSCRIPTION_PREVIEW_CHARS:
                    preview = (
                        preview[:MANUAL_TRANSCRIPTION_PREVIEW_CHARS] + "\n[Content continues...]"
                    )
                parts.append(
                    f"--- {transcript.file_name} ({transcript.format.upper()}) ---\n{preview}\n"
                )
            parts.append("\n")

        outputs = [o for o in request.connected_outputs if o.content and o.content.strip()]
        if outputs:
            parts.append("Related content from other agents:\n")
            parts.extend(f"{o.type}: {o.content}\n" for o in outputs)
            parts.append("\n")

        profile = request.profile
        if profile:
            parts.append("Channel Information:\n")
            parts.append(f"Channel Name: {profile.channel_name}\n")
            parts.append(f"Content Type: {profile.content_type}\n")
            parts.append(f"Niche: {profile.niche}\n")
            if profile.tone:
                parts.append(f"Tone: {profile.tone}\n")
            if profile.target_audience:
                parts.append(f"Target Audience: {profile.target_audience}\n")
            parts.append("\n")

        if request.mood_board_references:
            parts.append("Mood Board References:\n")
            for i, ref in enumerate(request.mood_board_references, start=1):
                label = ref.type.capitalize()
                parts.append(f"{i}. [{label}] {ref.title or ref.url}\n")
                hint = _MOOD_BOARD_HINTS.get(ref.type, "Consider overall vibe and approach")
                parts.append(f"   -> {hint}\n")
            parts.append("Blend these references creatively - don't copy directly.\n\n")

        parts.append(TYPE_INSTRUCTIONS[agent_type])

        if request.additional_context:
            parts.append(f"\nAdditional Requirements:\n{request.additional_context}\n")

        return "".join(parts)


_TITLE_QUOTES = re.compile(r"^[\"']|[\"']$")
_TITLE_PREFIX = re.compile(r"^Title:\s*", re.IGNORECASE)
_DESCRIPTION_PREFIX = re.compile(r"^Description:\s*", re.IGNORECASE)
_TWEETS_PREFIX = re.compile(r"^Tweets?:\s*", re.IGNORECASE)
_THREAD_PREFIX = re.compile(r"^Thread:\s*", re.IGNORECASE)


def clean_content(agent_type: AgentType | str, content: str) -> str:
    """Strip formatting the model tends to add around a draft."""
    if not content:
        return ""
    kind = AgentType(agent_type)
    if kind is AgentType.TITLE:
        content = _TITLE_PREFIX.sub("", _TITLE_QUOTES.sub("", content))
    elif kind is AgentType.DESCRIPTION:
        content = _DESCRIPTION_PREFIX.sub("", content)
    elif kind is AgentType.TWEETS:
        content = _THREAD_PREFIX.sub("", _TWEETS_PREFIX.sub("", content))
    return content.strip()
