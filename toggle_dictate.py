#!/usr/bin/env python3
"""
Dictate Toggle - one-key voice dictation

Bind this script to a hotkey. The first press starts recording, the next
press stops it, transcribes the audio and types the text at the cursor.

Usage:
    python toggle_dictate.py

Environment Variables:
    OPENAI_API_KEY          API key for the transcription endpoint (required)
    DICTATE_API_URL         Transcription endpoint URL
    DICTATE_MODEL           Transcription model (default: whisper-1)
    DICTATE_INPUT_LANGUAGE  Language code (e.g., 'en', 'pl', or 'auto')
    DICTATE_WORK_DIR        Directory holding recordings (default: current)
    DICTATE_ARCHIVE         Move handled audio to processed/: '1' or 'true'
    DICTATE_TONES           Play start/stop cues: '1' or 'true'
    DICTATE_VERBOSE         Enable verbose logging: '1' or 'true'
"""

from dictate_toggle.__main__ import main

if __name__ == "__main__":
    raise SystemExit(main())
