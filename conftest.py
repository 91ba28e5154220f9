"""
Global pytest configuration.

Loads a project-level .env before any tests are collected so configuration
defaults under test match how the server runs.
"""

from pathlib import Path

from dotenv import load_dotenv


def pytest_configure():
    """Load environment variables from the project .env file, if present."""
    env_file = Path(__file__).parent / ".env"

    if env_file.exists():
        load_dotenv(env_file, override=True)
        print(f"✓ Loaded environment variables from {env_file}")
