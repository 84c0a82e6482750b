"""Intent Match - fuzzy intent resolution for voice commands.

Maps noisy speech-to-text output onto one entry of a fixed phrase list:
1. Corrections: whole-word substitution of known transcription mistakes
2. Matching: edit-distance scoring against the phrase corpus, best match wins
"""

__version__ = "0.1.0"
