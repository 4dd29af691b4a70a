from __future__ import annotations

from abc import ABC, abstractmethod

from app.utils.url_cleaner import is_youtube_url

CATEGORY_SYSTEM_PROMPT = (
    "You are a content classifier that categorizes web content into one of three "
    "categories: 'Article', 'Video', or 'Research'. Return ONLY the category name as a "
    "single word, no explanation or additional text. Use these guidelines:\n"
    "- 'Video': video content, video sharing sites, or video-focused pages\n"
    "- 'Research': academic papers, scientific articles, research publications, or technical documentation\n"
    "- 'Article': general articles, blog posts, news, and other text-based content"
)

TAGS_SYSTEM_PROMPT = """You are a tag generator for web content. Generate 3-5 simple, focused tags that best categorize the content.

Rules:
1. Return ONLY a JSON array of lowercase strings, no other text
2. Keep tags as simple as possible:
   - For names, use only the person's name (e.g., "elon musk" not "elon musk twitter")
   - For concepts, use the core term (e.g., "immigration" not "immigration policy")
   - For companies, use the company name (e.g., "apple" not "apple earnings")
3. Each tag should be 1-2 words, rarely 3 if absolutely necessary
4. Never use generic terms like 'other', 'miscellaneous', 'general', 'article', 'content'
5. Focus on the main topics, people, or organizations mentioned
6. Avoid combining multiple concepts into one tag

Example good response: ["artificial intelligence", "microsoft", "sam altman"]
Example bad response: ["sam altman openai departure", "technology news", "ai ethics debate"]"""

VIDEO_TAGS_SYSTEM_PROMPT = """You are analyzing a YouTube video. Generate 3-5 accurate tags that represent the main topics, people, and organizations discussed in the video.

Rules:
1. Return ONLY a JSON array of lowercase strings, no other text
2. Focus on the actual video content and discussion topics
3. Include relevant people, companies, or organizations mentioned
4. Keep tags simple and focused (1-2 words, rarely 3 if needed)
5. Avoid generic terms like 'youtube', 'video', 'interview'

Example good response: ["artificial intelligence", "microsoft", "sam altman"]"""

SUMMARY_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates concise summaries of web content. "
    "Generate a brief, informative summary in 2-3 sentences that captures the main "
    "points and key takeaways."
)

VIDEO_SUMMARY_SYSTEM_PROMPT = (
    "You are analyzing a YouTube video. Generate a concise 2-3 sentence summary that "
    "accurately captures the main points discussed in the video. Focus on the key topics, "
    "insights, and any significant conclusions or takeaways. Be specific and avoid "
    "generic descriptions."
)


class LLMProvider(ABC):
    """LLM backend used for content analysis.

    The three generation primitives are written once here; adapters only
    implement ``complete`` (request shaping and response unwrapping) and tune
    how much of the content each primitive may send.
    """

    name: str = "provider"

    # Maximum characters of page content sent per primitive
    summary_excerpt_chars: int = 1000
    tags_excerpt_chars: int = 1000
    classify_excerpt_chars: int = 1000

    @abstractmethod
    async def complete(
        self,
        *,
        system: str,
        prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> str:  # pragma: no cover - interface only
        """Send one system + user message exchange and return the reply text.

        Implementations raise ``ProviderCallError`` on any SDK or transport failure.
        """

    async def generate_summary(self, text: str, url: str) -> str:
        system = VIDEO_SUMMARY_SYSTEM_PROMPT if is_youtube_url(url) else SUMMARY_SYSTEM_PROMPT
        return await self.complete(
            system=system,
            prompt=text[: self.summary_excerpt_chars],
            max_tokens=150,
            temperature=0.3,
        )

    async def generate_tags(self, text: str, url: str) -> str:
        system = VIDEO_TAGS_SYSTEM_PROMPT if is_youtube_url(url) else TAGS_SYSTEM_PROMPT
        return await self.complete(
            system=system,
            prompt=f"URL: {url}\n\nContent: {text[: self.tags_excerpt_chars]}",
            max_tokens=100,
            temperature=0.3,
        )

    async def classify(self, text: str, url: str) -> str:
        return await self.complete(
            system=CATEGORY_SYSTEM_PROMPT,
            prompt=f"URL: {url}\n\nContent: {text[: self.classify_excerpt_chars]}",
            max_tokens=10,
            temperature=0.1,
        )

    async def chat(self, *, system: str, message: str) -> str:
        """Free-form answer used by the bookmark chat endpoint."""
        return await self.complete(system=system, prompt=message, max_tokens=500, temperature=0.7)
