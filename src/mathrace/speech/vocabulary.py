"""Spoken number vocabularies."""

from pydantic import BaseModel, ConfigDict, Field


class NumberVocabulary(BaseModel):
    """Word table and noise words for one recognition language.

    Multi-word entries are written with single spaces (``"quatre vingt"``)
    and match hyphenated or spaced speech alike.
    """

    model_config = ConfigDict(frozen=True)

    language: str = Field(..., description="BCP 47 tag passed to the speech engine")
    words: dict[str, int] = Field(..., description="Number words and homophones, 0-100")
    fillers: tuple[str, ...] = Field(
        default=(),
        description="Hesitation markers stripped from the start of a transcript",
    )
    connectors: tuple[str, ...] = Field(
        default=(),
        description="Words skipped inside compound numbers ('et', 'and')",
    )
    min_value: int = Field(default=2, description="Smallest accepted answer")
    max_value: int = Field(default=150, description="Largest accepted answer")

    @property
    def longest_phrase(self) -> int:
        """Word count of the longest multi-word entry."""
        return max(len(word.split()) for word in self.words)

    def in_range(self, value: int) -> bool:
        return self.min_value <= value <= self.max_value


FRENCH_VOCABULARY = NumberVocabulary(
    language="fr-FR",
    words={
        "zéro": 0, "zero": 0,
        "un": 1, "une": 1,
        "deux": 2,
        "trois": 3,
        "quatre": 4,
        "cinq": 5,
        "six": 6, "sis": 6,
        "sept": 7, "set": 7,
        "huit": 8,
        "neuf": 9,
        "dix": 10, "dis": 10,
        "onze": 11,
        "douze": 12,
        "treize": 13,
        "quatorze": 14,
        "quinze": 15,
        "seize": 16,
        "vingt": 20,
        "trente": 30,
        "quarante": 40,
        "cinquante": 50,
        "soixante": 60,
        "quatre vingt": 80, "quatre vingts": 80,
        "cent": 100, "sang": 100,
    },
    fillers=("euh", "heu", "alors", "donc"),
    connectors=("et",),
)

ENGLISH_VOCABULARY = NumberVocabulary(
    language="en-US",
    words={
        "zero": 0,
        "one": 1, "won": 1,
        "two": 2, "to": 2, "too": 2,
        "three": 3,
        "four": 4, "for": 4,
        "five": 5,
        "six": 6,
        "seven": 7,
        "eight": 8, "ate": 8,
        "nine": 9,
        "ten": 10,
        "eleven": 11,
        "twelve": 12,
        "thirteen": 13,
        "fourteen": 14,
        "fifteen": 15,
        "sixteen": 16,
        "seventeen": 17,
        "eighteen": 18,
        "nineteen": 19,
        "twenty": 20,
        "thirty": 30,
        "forty": 40,
        "fifty": 50,
        "sixty": 60,
        "seventy": 70,
        "eighty": 80,
        "ninety": 90,
        "hundred": 100, "one hundred": 100, "a hundred": 100,
    },
    fillers=("um", "uh", "er", "so", "well"),
    connectors=("and",),
)
