"""Constants and configuration values for Sentilympics."""

# Rate Limiting Constants
class RateLimitConstants:
    """Constants related to client-side rate limiting."""

    ANALYSIS_KEY = "analysis"  # operation key for analysis requests
    CHAT_KEY = "chat"  # operation key for chat messages
    STORAGE_PREFIX = "rate_limit_"  # prefix for persisted counter entries

    MS_PER_MINUTE = 60 * 1000
    RESET_SIGNAL = "RATE_LIMIT_EXCEEDED"  # prefix of the string-encoded error
    RESET_SIGNAL_DELIMITER = "|"

# Prompt Constants
class PromptConstants:
    """Constants for LLM prompts and templates."""

    ANALYSIS_SYSTEM_PROMPT = (
        "You are an expert customer experience analyst. You produce precise, insightful "
        "sentiment analysis: clear trends over time, high-value keywords (complaints vs praise), "
        "and actionable recommendations with priorities. Output only valid JSON with no markdown "
        "or extra text."
    )

    GENERIC_CHAT_INSTRUCTION = "You are a helpful customer experience analyst assistant."
    SEARCH_CHAT_SUFFIX = "You have access to Google Search to provide real-time information."
    CONTEXT_SEARCH_HINT = "Use Google Search to find industry benchmarks or competitor comparisons."

    MAX_SNIPPET_WORDS = 5  # words per trend snippet
    MAX_ACTIONABLE_AREAS = 5  # actionable areas requested from the model
    MAX_DIGEST_COMPLAINTS = 15  # complaint keywords embedded in chat context

# Chat Message Constants
class ChatConstants:
    """Fixed texts shown in the chat transcript."""

    WELCOME_ID = "welcome"
    WELCOME_WITH_CONTEXT = (
        "I've reviewed the analysis. I can compare these metrics with competitors or help you "
        "dig into the complaints and actionable areas. What do you need?"
    )
    WELCOME_WITHOUT_CONTEXT = (
        "Hello! I can help answer questions about customer experience strategies or write "
        "Python analysis scripts."
    )
    CONNECTION_ERROR = "I'm having trouble connecting right now. Please try again."
    EMPTY_REPLY = "I didn't get a response."

# Error Handling Constants
class ErrorConstants:
    """User-facing error texts."""

    CONFIGURATION_HINT = "No AI provider is configured. Set GEMINI_API_KEY or OPENAI_API_KEY."
    TRANSPORT_HINT = "Failed to analyze reviews. Please try again."
    MALFORMED_HINT = "The AI returned an unexpected response. Please try again."
    BUSY_HINT = "An analysis is already running. Please wait for it to finish."
    RAW_PREVIEW_LENGTH = 500  # chars of raw payload kept in logs

# File and Path Constants
class FileConstants:
    """Constants for file operations."""

    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
