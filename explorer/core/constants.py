"""Application constants.

Contains Graph API field selections, placeholder values and the fixed
texts used by the summarization relay.
"""

# ---------------------------------------------------------------------------
# Graph API field selections
# ---------------------------------------------------------------------------
POST_LIST_FIELDS: str = "message,created_time,comments.summary(true).limit(0)"
COMMENT_FIELDS: str = "from,message,created_time"
ATTACHMENT_FIELDS: str = (
    "attachments{media,media_type,subattachments,description,title,url,target,type}"
)

# Page size used when the backend walks the full comment history
COMMENTS_WALK_LIMIT: int = 100

# ---------------------------------------------------------------------------
# Placeholders
# ---------------------------------------------------------------------------
UNKNOWN_AUTHOR: str = "Unknown"

# ---------------------------------------------------------------------------
# Summarization
# ---------------------------------------------------------------------------
NO_COMMENTS_SUMMARY: str = "No text comments available to analyze."
SUMMARY_FALLBACK: str = "Unable to generate summary."
SUMMARY_FAILED_ERROR: str = "Failed to analyze comments with Ollama API"

SUMMARY_PROMPT_TEMPLATE: str = (
    "Analyze the following {count} comments from a social media post and "
    "provide a concise 5-6 line summary highlighting the main themes, "
    "sentiments, and key points:\n\n{comments}\n\n"
    "Provide a brief, insightful summary in 5-6 lines."
)

# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------
# The "show more comments" control only appears on posts with at least
# this many comments upstream.
LOAD_MORE_MIN_COMMENTS: int = 3
