"""
Setup script for vocab-srs.

vocab-srs is the spaced-repetition scheduling engine behind a vocabulary
learning app. It serves three roles:

1. SM-2 Scheduling - Ease/interval updates for every answer
2. Session Composition - Today's due, learning and new items under a daily cap
3. Learner Stats - XP and calendar-day streaks

The 'vocab-srs' command is the operator entry point; the HTTP API is served
by 'vocab-srs serve' or 'uvicorn vocab_srs.api.main:app'.
"""

from setuptools import find_packages, setup

setup(
    name="vocab-srs",
    version="0.1.0",
    description="Spaced-repetition scheduling engine for vocabulary learning",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config", "main"],
    python_requires=">=3.10",
    install_requires=[
        # API
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        "psycopg2-binary>=2.9.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
        # IANA timezone data for zoneinfo
        "tzdata",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "httpx>=0.25.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "vocab-srs=vocab_srs.cli.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: FastAPI",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition sm2 vocabulary education",
)
