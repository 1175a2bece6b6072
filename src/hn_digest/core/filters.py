"""Static content policy applied before classification."""

HIRING_KEYWORDS = (
    "hiring",
    "job opening",
    "jobs at",
    "careers at",
    "join our team",
    "who wants to be hired",
)


def is_hiring_post(title: str, keywords: tuple[str, ...] = HIRING_KEYWORDS) -> bool:
    """
    Check if a story title looks like a job or hiring post.
    
    Args:
        title: Story title
        keywords: Substrings that mark a hiring post
    
    Returns:
        True if any keyword is found in the title (case-insensitive)
    """
    text = title.lower()
    return any(keyword.lower() in text for keyword in keywords)
