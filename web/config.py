"""Shared config for the CV web service, read from the environment."""
import os
from pathlib import Path

from cvengine.summary import DEFAULT_MODEL

# Project root (cv-engine/)
PROJECT_ROOT = Path(__file__).resolve().parents[1]

TALENT_STORE_PATH = os.environ.get("CV_TALENT_STORE", str(PROJECT_ROOT / "data" / "talents.json"))
LAYOUT_CONFIG_PATH = os.environ.get("CV_LAYOUT_CONFIG", "")
SUMMARY_MODEL = os.environ.get("CV_SUMMARY_MODEL", DEFAULT_MODEL)
ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY", "")
DEBUG = os.environ.get("CV_DEBUG", "").lower() in ("1", "true", "yes")
