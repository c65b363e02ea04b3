import logging
import re
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from config_models import Separators
from edifact_models import EdifactElement, EdifactSegment, Scalar

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')
_WHITESPACE_RUN = re.compile(r'\s+')
_INTEGER = re.compile(r'[0-9]+')
_DECIMAL = re.compile(r'[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)')


# --- Value Helpers ---
def normalize_edifact(edifact_string: str) -> str:
    """Removes line breaks and control characters and collapses whitespace runs."""
    without_controls = _CONTROL_CHARS.sub('', edifact_string)
    return _WHITESPACE_RUN.sub(' ', without_controls).strip()

def parse_value(value: Optional[str], separators: Separators) -> Scalar:
    """Classifies decoded element text as Decimal, int or str. Empty text is None."""
    if not value:
        return None
    if separators.decimal in value:
        candidate = value.replace(separators.decimal, '.')
        if _DECIMAL.fullmatch(candidate):
            try:
                return Decimal(candidate)
            except InvalidOperation:
                return value
        return value
    if _INTEGER.fullmatch(value):
        return int(value)
    return value

def split_unescaped(text: str, separator: str, release: str) -> List[str]:
    """Splits on separator, skipping separators preceded by the release character. Escapes are kept."""
    parts: List[str] = []
    current: List[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == release and i + 1 < len(text):
            current.append(text[i:i + 2])
            i += 2
            continue
        if char == separator:
            parts.append(''.join(current))
            current = []
        else:
            current.append(char)
        i += 1
    parts.append(''.join(current))
    return parts

def unescape(text: str, release: str) -> str:
    """Drops release characters, keeping the character each one escapes."""
    if release not in text:
        return text
    decoded: List[str] = []
    i = 0
    while i < len(text):
        if text[i] == release:
            if i + 1 < len(text):
                decoded.append(text[i + 1])
            i += 2
            continue
        decoded.append(text[i])
        i += 1
    return ''.join(decoded)


class EdifactParser:
    """Splits a raw EDIFACT message into segments and classified elements."""

    def __init__(self, separators: Optional[Separators] = None, include_raw_segments: bool = False,
                 detect_service_string: bool = True):
        self.separators = separators or Separators()
        self.include_raw_segments = include_raw_segments
        self.detect_service_string = detect_service_string

    def _detect_separators(self, edifact_string: str) -> Tuple[Separators, str]:
        """
        Reads a leading UNA service string advice, if present. Returns the separators
        for this message and the text that remains to be tokenized.
        """
        if self.detect_service_string and edifact_string.startswith('UNA') and len(edifact_string) >= 9:
            separators = Separators.from_service_string(edifact_string[:9])
            logger.debug(f"Separators detected from UNA: Segment='{separators.segment}', "
                         f"Element='{separators.data_element}', Component='{separators.component_element}', "
                         f"Decimal='{separators.decimal}', Release='{separators.release}'")
            return separators, edifact_string[9:]
        return self.separators, edifact_string

    def parse(self, edifact_string: str) -> List[EdifactSegment]:
        """Normalizes the raw text and tokenizes it into segments."""
        normalized = normalize_edifact(edifact_string)
        separators, content = self._detect_separators(normalized)
        segments = self.segmentize(content, separators)
        logger.debug(f"Tokenized {len(segments)} segments.")
        return segments

    def segmentize(self, content: str, separators: Optional[Separators] = None) -> List[EdifactSegment]:
        separators = separators or self.separators
        segments: List[EdifactSegment] = []
        buffer: List[str] = []
        i = 0

        while i < len(content):
            char = content[i]
            if char == separators.release:
                # Keep the escape pair so element splitting honors it as well.
                buffer.append(content[i:i + 2])
                i += 2
                continue
            if char == separators.segment:
                self._flush(buffer, segments, separators)
                buffer = []
            else:
                buffer.append(char)
            i += 1

        # A missing terminator on the last segment is tolerated.
        self._flush(buffer, segments, separators)
        return segments

    def _flush(self, buffer: List[str], segments: List[EdifactSegment], separators: Separators):
        segment_text = ''.join(buffer).strip()
        if segment_text:
            segments.append(self.parse_segment(segment_text, separators))

    def parse_segment(self, segment_text: str, separators: Optional[Separators] = None) -> EdifactSegment:
        separators = separators or self.separators
        parts = split_unescaped(segment_text, separators.data_element, separators.release)
        tag = unescape(parts[0], separators.release)
        elements = [self.parse_element(part, idx + 1, separators) for idx, part in enumerate(parts[1:])]
        logger.debug(f"Parsed segment '{tag}' with {len(elements)} elements.")
        return EdifactSegment(
            tag=tag,
            elements=elements,
            raw=segment_text if self.include_raw_segments else None,
        )

    def parse_element(self, element_text: str, position: int, separators: Optional[Separators] = None) -> EdifactElement:
        separators = separators or self.separators
        components = split_unescaped(element_text, separators.component_element, separators.release)
        if len(components) > 1:
            texts = [unescape(component, separators.release) or None for component in components]
            return EdifactElement(
                position=position,
                value=[parse_value(text, separators) for text in texts],
                text=texts,
            )
        text = unescape(element_text, separators.release) or None
        return EdifactElement(position=position, value=parse_value(text, separators), text=text)
