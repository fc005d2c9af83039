"""
Text Cleaning Module for HARO Email Processing.

Handles:
1. HTML → Plain Text conversion
2. Leaked CSS removal (rule blocks, @media blocks)
3. Boilerplate removal (sponsor block, INDEX, footer, tracking tokens)
4. Entity decoding and whitespace normalization
5. Per-field cleanup of encoding artifacts
"""

import re

from bs4 import BeautifulSoup

# @media blocks contain nested rule blocks, so they go first
MEDIA_BLOCK_PATTERN = r'@media[^{]*\{(?:[^{}]*\{[^{}]*\})*[^{}]*\}'
CSS_BLOCK_PATTERN = r'[.#]?[A-Za-z][\w\-]*(?:[\s,>+~]+[.#]?[A-Za-z][\w\-:]*){0,5}\s*\{[^{}]*:[^{}]*\}'

# (pattern, replacement) applied in order after markup stripping
BOILERPLATE_PATTERNS = [
    # Footer and subscription management (everything after them goes)
    (r'unsubscribe[\s\S]*$', ' '),
    (r'manage subscription[\s\S]*$', ' '),
    (r'follow us on[\s\S]*$', ' '),
    (r'help a reporter out \d+[\s\S]*$', ' '),
    (r'your haro subscription address[\s\S]*$', ' '),
    (r'for delivery help[\s\S]*$', ' '),

    # Tracking tokens
    (r'\?token=[\w.-]+', ' '),
    (r'eyJ[\w.-]+', ' '),

    # Sponsor block that precedes the real content
    (r'earn high commissions[\s\S]*?become an affiliate[^.]*\.', ' '),
    (r'sponsored[\s\S]*?queries from', 'Queries from'),

    # **** INDEX **** ... **** table of contents
    (r'\*+\s*INDEX\s*\*+[\s\S]*?\*+', ' '),

    # Social handles and navigation
    (r'@\w+\s+https?://[^\s]+', ' '),
    (r'back to top', ' '),
    (r'forwarded this email\?[\s\S]*?helpareporter\.com', ' '),
    (r'haro connects journalists with expert sources', ' '),
]

ENTITY_REPLACEMENTS = [
    ('&nbsp;', ' '),
    ('&amp;', '&'),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&quot;', '"'),
    ('&#39;', "'"),
]

TRAILING_FOOTER_PATTERN = r'help a reporter out \d{4}.*$'

# Mojibake left behind by mis-decoded UTF-8 (â€™, Â etc.)
ENCODING_ARTIFACT_PATTERN = r'[âÂ]+'
DISALLOWED_CHARS_PATTERN = r'[^\w\s.,;:!?()\-\'"/\[\]{}@#$%&*+=<>|~`]'


def html_to_text(raw_html: str) -> str:
    """
    Convert HTML email content to plain text.

    Links keep their target as "text (href)" so outlet URLs survive
    the markup stripping.

    Args:
        raw_html: Raw HTML (or plain text) email body

    Returns:
        Text with all tags removed
    """
    if not raw_html:
        return ""

    soup = BeautifulSoup(raw_html, "html.parser")

    for tag in soup(['script', 'style', 'head', 'meta', 'link', 'title']):
        tag.decompose()

    for a in soup.find_all('a', href=True):
        href = a.get('href', '').strip()
        text = a.get_text(strip=True)
        if href.startswith(('http://', 'https://')) and text and text != href:
            a.replace_with(f"{text} ({href})")
        else:
            a.replace_with(text or href)

    return soup.get_text(separator=' ')


def remove_css(text: str) -> str:
    """Remove CSS rule blocks that leak into text after markup stripping."""
    text = re.sub(MEDIA_BLOCK_PATTERN, ' ', text, flags=re.IGNORECASE)
    return re.sub(CSS_BLOCK_PATTERN, ' ', text)


def remove_boilerplate(text: str) -> str:
    """Remove footer, sponsor, index and tracking boilerplate."""
    for pattern, replacement in BOILERPLATE_PATTERNS:
        text = re.sub(pattern, replacement, text, flags=re.IGNORECASE)
    return text


def decode_entities(text: str) -> str:
    for entity, char in ENTITY_REPLACEMENTS:
        text = text.replace(entity, char)
    return text


def normalize_body(raw_body: str) -> str:
    """
    Full body normalization.

    Never raises; a pattern that does not match leaves its part of the
    text untouched.

    Args:
        raw_body: Raw HARO email body (HTML/plain text mixture)

    Returns:
        Single-line text with boilerplate removed
    """
    if not raw_body:
        return ""

    # Step 1: HTML → Text
    text = html_to_text(raw_body)

    # Step 2: Leaked CSS
    text = remove_css(text)

    # Step 3: Boilerplate
    text = remove_boilerplate(text)

    # Step 4: Entities and whitespace
    text = decode_entities(text)
    text = re.sub(r'\s+', ' ', text).strip()

    return re.sub(TRAILING_FOOTER_PATTERN, '', text, flags=re.IGNORECASE).strip()


def clean_text_field(text: str) -> str:
    """
    Clean a single extracted field from encoding artifacts.

    Args:
        text: Raw field value

    Returns:
        Field value with garbage characters replaced and whitespace collapsed
    """
    if not text:
        return text

    text = re.sub(ENCODING_ARTIFACT_PATTERN, ' ', text)
    text = re.sub(DISALLOWED_CHARS_PATTERN, ' ', text)
    text = re.sub(r'[\u00A0-\u00FF]{3,}', ' ', text)
    return re.sub(r'\s+', ' ', text).strip()
