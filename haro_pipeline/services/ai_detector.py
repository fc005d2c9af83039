"""
Anti-AI Instruction Detector.

Journalists sometimes hide a long base64 or hex string in a query that
tells AI tools to slip a specific "trigger word" into the pitch. This
module finds those payloads, decodes them, records the trigger words and
strips the encoded run from the text shown to users.
"""

import base64
import binascii
import re
from typing import List, Optional

import structlog

from haro_pipeline.schemas import AiDetectionResult
from haro_pipeline.services.text_cleaner import (
    DISALLOWED_CHARS_PATTERN,
    ENCODING_ARTIFACT_PATTERN,
)

logger = structlog.get_logger()

MIN_ENCODED_LENGTH = 50
MIN_NORMAL_CHAR_RATIO = 0.3

BASE64_RUN = re.compile(r'[A-Za-z0-9+/]{%d,}=*' % MIN_ENCODED_LENGTH)
HEX_RUN = re.compile(r'[0-9a-fA-F]{%d,}' % MIN_ENCODED_LENGTH)

TRIGGER_WORD_PATTERN = re.compile(
    r'"([^"]+)"|(?<!\w)\'([^\']+)\'(?!\w)|“([^”]+)”|word\s+(\w+)',
    re.IGNORECASE,
)


def _decode_base64(candidate: str) -> Optional[str]:
    padded = candidate.rstrip('=')
    padded += '=' * (-len(padded) % 4)
    try:
        return base64.b64decode(padded, validate=True).decode('utf-8')
    except (binascii.Error, ValueError, UnicodeDecodeError):
        return None


def _decode_hex(candidate: str) -> Optional[str]:
    try:
        return bytes.fromhex(candidate).decode('utf-8')
    except (ValueError, UnicodeDecodeError):
        return None


def is_instruction_payload(decoded: str) -> bool:
    """Decoded text counts as an instruction only if it mentions both "ai" and "word"."""
    lowered = decoded.lower()
    return 'ai' in lowered and 'word' in lowered


def extract_trigger_words(decoded: str) -> List[str]:
    """Quoted strings and "word <token>" occurrences, de-duplicated in order."""
    words: List[str] = []
    for match in TRIGGER_WORD_PATTERN.finditer(decoded):
        word = next(group for group in match.groups() if group is not None).strip()
        if word and word not in words:
            words.append(word)
    return words


def _strip_garbage(text: str) -> str:
    text = re.sub(ENCODING_ARTIFACT_PATTERN, ' ', text)
    text = re.sub(DISALLOWED_CHARS_PATTERN, ' ', text)

    kept = []
    for line in text.split('\n'):
        normal = re.sub(r'[^\w\s]', '', line)
        if len(normal) > len(line) * MIN_NORMAL_CHAR_RATIO:
            kept.append(line)

    return re.sub(r'\s+', ' ', '\n'.join(kept)).strip()


def detect_anti_ai_instructions(text: str) -> AiDetectionResult:
    """
    Scan a query section for encoded anti-AI instructions.

    Invalid base64/hex candidates are skipped silently, as is any decoded
    text that does not read like an instruction.

    Args:
        text: Raw query section

    Returns:
        AiDetectionResult with the cleaned text (payloads and garbage removed)
    """
    result = AiDetectionResult(cleaned_text=text)
    if not text:
        return result

    cleaned = text
    instructions: List[str] = []

    candidates = [(m, _decode_base64) for m in BASE64_RUN.findall(text)]
    candidates += [(m, _decode_hex) for m in HEX_RUN.findall(text)]

    for candidate, decode in candidates:
        if candidate not in cleaned:
            continue
        decoded = decode(candidate)
        if decoded is None or not is_instruction_payload(decoded):
            continue

        result.has_detection = True
        instructions.append(decoded)
        for word in extract_trigger_words(decoded):
            if word not in result.trigger_words:
                result.trigger_words.append(word)
        cleaned = cleaned.replace(candidate, '')

    if instructions:
        result.decoded_instructions = '\n'.join(instructions)
        logger.debug(
            "anti_ai_instructions_detected",
            payloads=len(instructions),
            trigger_words=result.trigger_words,
        )

    result.cleaned_text = _strip_garbage(cleaned)
    return result
