"""Prompt templates for the relevance oracle and enrichment calls."""

from collections.abc import Sequence
from typing import Optional

from hn_digest.core.entities import CandidateItem, Comment, Feedback, InterestProfile, Rating

FEEDBACK_EXAMPLES = 5
RELEVANCE_ARTICLE_CHARS = 1000
ENRICHMENT_ARTICLE_CHARS = 2000
COMMENT_CHARS = 600

RELEVANCE_SYSTEM = "You filter Hacker News stories for one reader. Be decisive."

RELEVANCE_PROMPT = """You are helping filter Hacker News stories based on user interests.

User interests: {interests}
{excluded}{examples}
Story title: {title}
Story URL: {url}
{article}
Top comments from HN discussion:
{comments}

Based on the user's interests, the story content, the HN discussion, and the examples of past feedback, is this story relevant?
Answer only YES or NO, followed by a brief one-sentence reason."""

SUMMARY_PROMPT = """Summarize this Hacker News story and discussion:

Title: {title}
URL: {url}
Points: {score}
{article}
Top HN comments:
{comments}

Provide:
1. A concise 2-3 sentence summary of the main topic
2. Key insights from the discussion
3. Why this might be interesting or important"""

KEY_TERMS_PROMPT = """Based on this Hacker News story and discussion, identify the 3-5 most important technical terms, concepts, or jargon that a reader should understand. For each term, provide a clear, beginner-friendly explanation (1-2 sentences).

Title: {title}
{article}
Top HN comments:
{comments}

Format your response as a list where each item is:
**Term**: Brief explanation

Only include terms that are actually discussed in the article or comments."""

TOPICS_PROMPT = """List 2-5 short topic tags (one to three words each) for this Hacker News story.

Title: {title}
{article}
Answer with a single comma-separated line and nothing else."""


def format_feedback_examples(feedback: Feedback, limit: int = FEEDBACK_EXAMPLES) -> str:
    """Render the most recent feedback titles as worked examples."""
    sections = []
    
    positive = feedback.recent(Rating.POSITIVE, limit)
    if positive:
        lines = [f'{i}. "{record.title}"' for i, record in enumerate(positive, 1)]
        sections.append("Examples of stories the user found RELEVANT:\n" + "\n".join(lines))
    
    negative = feedback.recent(Rating.NEGATIVE, limit)
    if negative:
        lines = [f'{i}. "{record.title}"' for i, record in enumerate(negative, 1)]
        sections.append("Examples of stories the user found NOT RELEVANT:\n" + "\n".join(lines))
    
    if not sections:
        return ""
    return "\n" + "\n\n".join(sections) + "\n"


def format_excluded(excluded: Sequence[str]) -> str:
    if not excluded:
        return ""
    return (
        f"User is NOT interested in: {', '.join(excluded)}\n"
        "Answer NO for stories that are primarily about any of these topics.\n"
    )


def format_comments(comments: Sequence[Comment]) -> str:
    """Flatten top comments, one block per thread with indented replies."""
    if not comments:
        return "No comments yet"
    
    blocks = []
    for i, comment in enumerate(comments, 1):
        lines = [f"Comment {i} by {comment.author}:", comment.text[:COMMENT_CHARS]]
        lines.extend(_format_replies(comment.replies, depth=1))
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _format_replies(replies: Sequence[Comment], depth: int) -> list[str]:
    lines = []
    indent = "  " * depth
    for reply in replies:
        lines.append(f"{indent}> {reply.author}: {reply.text[:COMMENT_CHARS]}")
        lines.extend(_format_replies(reply.replies, depth + 1))
    return lines


def _article_block(article_text: Optional[str], label: str, chars: int) -> str:
    if not article_text:
        return ""
    return f"{label}: {article_text[:chars]}\n"


def build_relevance_prompt(
    item: CandidateItem,
    article_text: Optional[str],
    profile: InterestProfile,
    feedback: Feedback,
    comments: Sequence[Comment] = (),
) -> str:
    return RELEVANCE_PROMPT.format(
        interests=", ".join(profile.interests),
        excluded=format_excluded(profile.excluded),
        examples=format_feedback_examples(feedback),
        title=item.title,
        url=item.url or "Discussion only",
        article=_article_block(article_text, "Article content (excerpt)", RELEVANCE_ARTICLE_CHARS),
        comments=format_comments(comments),
    )


def build_summary_prompt(
    item: CandidateItem, article_text: Optional[str], comments: Sequence[Comment] = ()
) -> str:
    return SUMMARY_PROMPT.format(
        title=item.title,
        url=item.url or "Discussion only",
        score=item.score,
        article=_article_block(article_text, "\nArticle content", ENRICHMENT_ARTICLE_CHARS),
        comments=format_comments(comments),
    )


def build_key_terms_prompt(
    item: CandidateItem, article_text: Optional[str], comments: Sequence[Comment] = ()
) -> str:
    return KEY_TERMS_PROMPT.format(
        title=item.title,
        article=_article_block(article_text, "\nArticle content", ENRICHMENT_ARTICLE_CHARS),
        comments=format_comments(comments),
    )


def build_topics_prompt(item: CandidateItem, article_text: Optional[str]) -> str:
    return TOPICS_PROMPT.format(
        title=item.title,
        article=_article_block(article_text, "Article content", RELEVANCE_ARTICLE_CHARS),
    )
