"""vocab-srs: spaced-repetition scheduling engine for vocabulary learning."""

__version__ = "0.1.0"
