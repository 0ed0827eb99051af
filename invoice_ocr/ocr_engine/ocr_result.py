"""
OCR Result Data Classes.

This module defines the structures handed from OCR backends to the
extraction pipeline. The parser only needs plain text and one overall
recognition confidence; words and lines are kept for logging and debugging.

Classes:
    OCRWord: Individual recognized word
    OCRLine: Line of words in reading order
    OCRResult: Recognized text and confidence for one image or document

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
import json


@dataclass
class OCRWord:
    """
    A single word recognized by OCR.

    Attributes:
        text: The recognized text content
        bbox: Bounding box as (x1, y1, x2, y2) in pixels
        confidence: OCR confidence score (0-100), or None when the engine gave none
    """
    text: str
    bbox: Tuple[int, int, int, int] = (0, 0, 0, 0)
    confidence: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'bbox': list(self.bbox),
            'confidence': self.confidence,
        }


@dataclass
class OCRLine:
    """
    A line of words, ordered left to right.

    Example:
        >>> line = OCRLine(words=[OCRWord("Bill"), OCRWord("To")])
        >>> line.text
        'Bill To'
    """
    words: List[OCRWord] = field(default_factory=list)

    @property
    def text(self) -> str:
        return ' '.join(word.text for word in self.words)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'words': [w.to_dict() for w in self.words],
        }


@dataclass
class OCRResult:
    """
    Output of an OCR pass.

    Attributes:
        text: Recognized text, one line per OCR line
        confidence: Overall recognition confidence (0-100)
        lines: Recognized lines, when the backend provides them
        engine: OCR engine name
        processing_time: Time taken for OCR in seconds
        page_count: Number of pages this result covers
        metadata: Additional engine metadata

    Example:
        >>> result = engine.recognize(image)
        >>> print(f"{result.confidence:.1f}% over {result.page_count} page(s)")
        >>> print(result.text)
    """
    text: str = ''
    confidence: float = 0.0
    lines: List[OCRLine] = field(default_factory=list)
    engine: str = "unknown"
    processing_time: float = 0.0
    page_count: int = 1
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_lines(cls, lines: List[OCRLine], **kwargs: Any) -> 'OCRResult':
        """
        Build a result from lines, averaging word confidences.

        Words without a confidence are left out of the average.
        """
        scores = [
            word.confidence
            for line in lines
            for word in line.words
            if word.confidence is not None
        ]
        confidence = sum(scores) / len(scores) if scores else 0.0
        text = '\n'.join(line.text for line in lines)
        return cls(text=text, confidence=confidence, lines=lines, **kwargs)

    @classmethod
    def combine(cls, pages: Sequence['OCRResult']) -> 'OCRResult':
        """
        Merge per-page results into one document result.

        Page texts are joined with newlines and the confidence is the
        arithmetic mean of the page confidences.

        Raises:
            ValueError: If there are no pages.
        """
        if not pages:
            raise ValueError("Cannot combine zero OCR pages")

        return cls(
            text='\n'.join(page.text for page in pages),
            confidence=sum(page.confidence for page in pages) / len(pages),
            lines=[line for page in pages for line in page.lines],
            engine=pages[0].engine,
            processing_time=sum(page.processing_time for page in pages),
            page_count=len(pages),
            metadata={'pages': [page.metadata for page in pages]},
        )

    @property
    def word_count(self) -> int:
        return sum(len(line.words) for line in self.lines)

    def is_empty(self) -> bool:
        """Check if no text was recognized."""
        return not self.text.strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for serialization."""
        return {
            'text': self.text,
            'confidence': self.confidence,
            'engine': self.engine,
            'processing_time': self.processing_time,
            'page_count': self.page_count,
            'lines': [l.to_dict() for l in self.lines],
            'metadata': self.metadata,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"OCRResult(engine={self.engine}, pages={self.page_count}, "
            f"confidence={self.confidence:.1f}%)"
        )
