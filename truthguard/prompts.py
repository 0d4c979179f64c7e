"""
Prompt construction for the chat-completion gateway.

The user message is a list of OpenAI-style content parts: one text
instruction and, when an image was submitted, one `image_url` part.
"""

from typing import Any, Dict, List, Optional

SYSTEM_PROMPT = (
    "You are an expert fake news detector with expertise in identifying misinformation, "
    "manipulated images, and misleading content. Provide accurate, balanced analysis."
)

RESPONSE_FORMAT = (
    'Respond in JSON format with: {"result": "fake" or "real", "confidence": 0-100, '
    '"keywords": ["keyword1", "keyword2"], "explanation": "brief explanation"}'
)

TEXT_INSTRUCTION = (
    "Analyze this text and determine if it's likely to be fake news or real news. Consider:\n"
    "- Sensationalist language\n"
    "- Verifiable facts vs claims\n"
    "- Emotional manipulation\n"
    "- Source credibility indicators\n"
    "\n"
    'Text to analyze: "{text}"\n'
    "\n"
    "{response_format}"
)

IMAGE_INSTRUCTION = (
    "Analyze this image and determine if it's likely to be manipulated, fake, or authentic. Consider:\n"
    "- Signs of digital manipulation\n"
    "- Inconsistencies in lighting or shadows\n"
    "- Unnatural elements\n"
    "- Context clues\n"
    "\n"
    "{response_format}"
)

CROSS_CHECK_INSTRUCTION = (
    "\n\nAlso analyze the provided image for any signs of manipulation or "
    "inconsistencies that might support or contradict the text."
)


def build_user_content(text: Optional[str], image_url: Optional[str]) -> List[Dict[str, Any]]:
    """
    Build the user message parts for a submission.

    Returns an empty list when neither a non-blank text nor an image URL
    was given; callers treat that as "nothing to analyze".
    """
    has_text = bool(text and text.strip())
    parts: List[Dict[str, Any]] = []

    if has_text:
        instruction = TEXT_INSTRUCTION.format(text=text, response_format=RESPONSE_FORMAT)
        if image_url:
            instruction += CROSS_CHECK_INSTRUCTION
        parts.append({"type": "text", "text": instruction})
    elif image_url:
        parts.append({"type": "text", "text": IMAGE_INSTRUCTION.format(response_format=RESPONSE_FORMAT)})

    if image_url:
        parts.append({"type": "image_url", "image_url": {"url": image_url}})

    return parts
