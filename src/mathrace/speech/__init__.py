"""Spoken and typed answer recognition."""

from .keypad import KeypadBuffer
from .parser import parse_number
from .recognizer import (
    AnswerCandidate,
    AnswerRecognizer,
    InputSource,
    NullSpeechEngine,
    RecognitionErrorKind,
    RecognitionState,
    RecognizerStatus,
    SpeechEngine,
    SpeechEngineError,
    TranscriptEvent,
)
from .vocabulary import ENGLISH_VOCABULARY, FRENCH_VOCABULARY, NumberVocabulary

__all__ = [
    "AnswerCandidate",
    "AnswerRecognizer",
    "ENGLISH_VOCABULARY",
    "FRENCH_VOCABULARY",
    "InputSource",
    "KeypadBuffer",
    "NullSpeechEngine",
    "NumberVocabulary",
    "RecognitionErrorKind",
    "RecognitionState",
    "RecognizerStatus",
    "SpeechEngine",
    "SpeechEngineError",
    "TranscriptEvent",
    "parse_number",
]
